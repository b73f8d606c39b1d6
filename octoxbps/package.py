"""Package information parsing and formatting helpers for XBPS output."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum, IntEnum

XBPS_CORE_DB_FILE = "pkgdb*.plist"
PKGNG_FAKE_REPOSITORY = "_WWW"

FORBIDDEN_PACKAGES = frozenset(
    {"base-files", "base-system", "libxbps", "xbps", "xbps-triggers"}
)

_URL_PATTERN = re.compile(r'((ht|f)tp(s?))://(\S)+[^"|)|(|.|\s|\n]', re.IGNORECASE)
_TRAILING_VERSION = re.compile(r"-[0-9.]+$")
_TRAILING_VERSION_REVISION = re.compile(r"-[0-9.]+_[0-9.]+$")

_TIB = 1073741824.0
_GIB = 1048576.0
_MIB = 1024.0
_KIB = 1.0


class PackageStatus(IntEnum):
    """State of a package; the order is used when sorting by status."""

    INSTALLED = 0
    NON_INSTALLED = 1
    OUTDATED = 2
    NEWER = 3
    FOREIGN = 4
    FOREIGN_OUTDATED = 5


class PackageAnchor(Enum):
    """Whether dependency names are rendered as navigation links."""

    WITH_PACKAGE_ANCHOR = "with"
    WITHOUT_PACKAGE_ANCHOR = "without"


class ViewOptions(Enum):
    """Which packages a view shows."""

    ALL_PKGS = 0
    INSTALLED_PKGS = 1
    NON_INSTALLED_PKGS = 2


@dataclass
class PackageListData:
    """One entry of a package listing."""

    name: str = ""
    repository: str = ""
    origin: str = ""
    version: str = ""
    categories: str = ""
    www: str = ""
    comment: str = ""
    description: str = ""
    outdated_version: str = ""
    installed_size: float = 0.0
    download_size: float = 0.0
    installed_on: str = ""
    license: str = ""
    popularity: int = 0
    status: PackageStatus = PackageStatus.NON_INSTALLED

    def __post_init__(self) -> None:
        self.outdated_version = self.outdated_version.strip()


@dataclass
class PackageInfoData:
    """Detailed information about a single package."""

    name: str = ""
    repository: str = ""
    version: str = ""
    url: str = ""
    license: str = ""
    group: str = ""
    provides: str = ""
    required_by: str = ""
    optional_for: str = ""
    depends_on: str = ""
    opt_depends: str = ""
    conflicts_with: str = ""
    replaces: str = ""
    packager: str = ""
    maintainer: str = ""
    arch: str = ""
    description: str = ""
    comment: str = ""
    build_date: str = ""
    install_date: str = ""
    download_size: float = 0.0
    installed_size: float = 0.0
    download_size_as_string: str = ""
    installed_size_as_string: str = ""
    options: str = ""


@dataclass
class TransactionInfo:
    """Targets of a transaction and the sizes involved."""

    packages: list[str] = field(default_factory=list)
    size_to_install: str = ""
    size_to_download: str = ""


@dataclass
class OutdatedPackageInfo:
    """Installed and available versions of an outdated package."""

    old_version: str = ""
    new_version: str = ""


def _left(text: str, n: int) -> str:
    """Return the first n characters, or the whole text when n is negative."""
    return text if n < 0 else text[:n]


def _to_float(text: str) -> float | None:
    if "_" in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def get_base_name(p: str) -> str:
    """Return the package name of a name-version-revision string."""
    name_segments = p.count("-") + 1 - 3
    base = "-".join(p.split("-")[:name_segments]) if name_segments > 0 else ""
    if not base:
        base = _left(p, p.find("-"))
    return base


def make_url_clickable(s: str) -> str:
    """Wrap every http(s)/ftp(s) URL found in the text in an HTML anchor."""
    result = s
    match = _URL_PATTERN.search(result)
    while match:
        found = match.group(0).replace("</font></b><br>", "")
        found = found.replace("`", "").replace("'", "")
        link = found.strip()
        anchor = f'<a href="{link}">{link}</a>'
        start = match.start()
        result = result[:start] + anchor + result[start + len(found):]
        match = _URL_PATTERN.search(result, start + 2 * len(found) + 15)
    return result


def kbytes_to_size(kbytes: float) -> str:
    """Render a size given in KiB using the largest fitting binary unit."""
    if kbytes >= _TIB:
        return "%.2f TiB" % (kbytes / _TIB)
    if kbytes >= _GIB:
        return "%.2f GiB" % (kbytes / _GIB)
    if kbytes >= _MIB:
        return "%.2f MiB" % (kbytes / _MIB)
    if kbytes >= _KIB:
        return "%.2f KiB" % (kbytes / _KIB)
    if kbytes < _KIB:
        return "%.2f Bytes" % (kbytes * 1024)
    return "%.2f Bytes" % kbytes


def str_to_kbytes(size: str) -> float:
    """Convert a decimal size string (kB, MB, B) to KiB; 0 if unparsable."""
    if size == "0.00B":
        return 0.0
    lowered = size.lower()
    if "kb" in lowered:
        value = _to_float(size[: lowered.find("kb")])
        return value / 1.024 if value is not None else 0.0
    if "MB" in size:
        value = _to_float(size[: size.find("MB")])
        return (value * 1024) / 1.048576 if value is not None else 0.0
    if "B" in size:
        value = _to_float(size[: size.find("B")])
        return value if value is not None else 0.0
    return 0.0


def str_to_kbytes2(size: str) -> float:
    """Convert a binary size string (KiB, MiB, B) to KiB; 0 if unparsable."""
    if size == "0.00B":
        return 0.0
    lowered = size.lower()
    if "kib" in lowered:
        value = _to_float(size[: lowered.find("kib")])
        return value if value is not None else 0.0
    if "MiB" in size:
        value = _to_float(size[: size.find("MiB")])
        return value * 1024 if value is not None else 0.0
    if "B" in size:
        value = _to_float(size[: size.find("B")])
        return value / 1024 if value is not None else 0.0
    return 0.0


def _value_after_colon(pkg_info: str, field_pos: int) -> str:
    start = pkg_info.find(":", field_pos + 1) + 2
    rest = pkg_info[start:]
    return _left(rest, rest.find("\n")).strip()


def extract_field(field: str, pkg_info: str) -> str:
    """Return the value of a field in package information text."""
    field_pos = pkg_info.find(field)

    if field == "architecture":
        return _value_after_colon(pkg_info, field_pos)
    if field_pos <= 0:
        return ""
    if field != "Options":
        return _value_after_colon(pkg_info, field_pos)

    start = pkg_info.find(":", field_pos + 1) + 2
    rest = pkg_info[start:]
    end = rest.find("Shared Libs required")
    end2 = rest.find("Shared Libs provided")
    if end2 == -1:
        end2 = rest.find("Annotations")
    if (end > end2 and end2 != -1) or (end == -1 and end2 != -1):
        end = end2
    return _left(rest, end).strip().replace("\n", "<br>")


def get_url(pkg_info: str) -> str:
    """Return the homepage field, made clickable."""
    url = extract_field("homepage", pkg_info)
    return make_url_clickable(url) if url else url


def parse_information(pkg_name: str, pkg_info: str) -> PackageInfoData:
    """Build a PackageInfoData from package information text."""
    return PackageInfoData(
        name=pkg_name,
        version=extract_field("Version", pkg_info),
        url=get_url(pkg_info),
        license=extract_field("license", pkg_info),
        group=extract_field("Categories", pkg_info),
        maintainer=extract_field("maintainer", pkg_info),
        arch=extract_field("architecture", pkg_info),
        build_date=extract_field("build-date", pkg_info),
        install_date=extract_field("install-date", pkg_info),
        description=extract_field("Description", pkg_info),
        comment=extract_field("Comment", pkg_info),
        download_size=0.0,
        installed_size=0.0,
        download_size_as_string=extract_field("filename-size", pkg_info),
        installed_size_as_string=extract_field("installed_size", pkg_info),
        options=extract_field("Options", pkg_info),
    )


def get_optional_deps(pkg_info: str) -> list[str]:
    """Return the optional dependencies listed in package information text."""
    deps = extract_field("Optional Deps", pkg_info)
    return [dep for dep in deps.split("<br>") if dep and dep != "None"]


def format_dependencies(
    dependencies: str, anchor: PackageAnchor = PackageAnchor.WITH_PACKAGE_ANCHOR
) -> str:
    """Sort a newline separated dependency list and join it with spaces."""
    names = sorted(dep for dep in dependencies.split("\n") if dep)
    if anchor is PackageAnchor.WITH_PACKAGE_ANCHOR:
        parts = [f'<a href="goto:{dep}">{dep}</a>' for dep in names]
    else:
        parts = names
    return " ".join(parts).strip()


def parse_search_string(search: str, exact_match: bool = False) -> str:
    """Turn a user search with * and ? wildcards into a regular expression."""
    if search.startswith("*."):
        search = "\\S+\\." + search[2:]
    if search.startswith("*"):
        search = "\\S+" + search[1:]
    if search.endswith("*"):
        search = search[:-1] + "\\S*"
    if "^" not in search and not search.startswith("\\S"):
        search = ("^" if exact_match else "\\S*") + search
    if "$" not in search:
        if not exact_match and not search.endswith("\\S*"):
            search += "\\S*"
        else:
            search += "$"
    return search.replace("?", ".").replace("+", "\\+")


def extract_pkg_name_from_anchor(name: str) -> str:
    """Return the bare package name of a dependency anchor."""
    sign = name.find(">")
    if sign == -1:
        sign = name.find("<")
    if sign == -1:
        sign = name.find("=")
    result = _left(name, sign).replace("%3E", "")
    result = _TRAILING_VERSION.sub("", result)
    return _TRAILING_VERSION_REVISION.sub("", result)


def is_forbidden(name: str) -> bool:
    """Return True if the package must never be removed."""
    return name in FORBIDDEN_PACKAGES