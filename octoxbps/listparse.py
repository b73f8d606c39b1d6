"""Parsers for the listings XBPS tools print, and local package lookups."""

from __future__ import annotations

import fnmatch
import platform
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path

from octoxbps.package import (
    XBPS_CORE_DB_FILE,
    OutdatedPackageInfo,
    PackageListData,
    PackageStatus,
    TransactionInfo,
)

DEFAULT_CACHE_DIR = "/var/cache/xbps"
DEFAULT_DB_DIR = "/var/db/xbps/"

_INSTALLED_MARKERS = frozenset({"[*]", "i", "ii"})

InstallDateLookup = Callable[[str], str]


def _lines(output: str) -> list[str]:
    return [line for line in output.split("\n") if line]


def _left(text: str, n: int) -> str:
    return text if n < 0 else text[:n]


def _to_double(text: str) -> float:
    if "_" in text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        return 0.0


def split_name_version(pkg_aux: str) -> tuple[str, str] | None:
    """Split "name-version" at the last dash; None when there is no dash."""
    dash = pkg_aux.rfind("-")
    if dash == -1:
        return None
    return pkg_aux[:dash], pkg_aux[dash + 1:]


def version_from_pkgver(pkgver: str) -> str:
    """Return the version part of a "name-version" string."""
    return pkgver[pkgver.rfind("-") + 1:]


def parse_unrequired_list(output: str) -> set[str]:
    """Return the names of packages no other package depends on."""
    result = set()
    for line in _lines(output):
        dash = line.rfind("-")
        if dash != -1:
            result.add(line[:dash])
    return result


def parse_outdated_list(
    output: str, installed_versions: Mapping[str, str]
) -> dict[str, OutdatedPackageInfo]:
    """Return outdated packages keyed by name, sorted by name.

    ``installed_versions`` maps a package name to its installed pkgver
    (or bare version).
    """
    result: dict[str, OutdatedPackageInfo] = {}
    for line in _lines(output):
        if "update" not in line:
            continue
        split = split_name_version(line.split(" ")[0])
        if split is None:
            continue
        name, new_version = split
        old_version = version_from_pkgver(installed_versions.get(name, ""))
        result[name] = OutdatedPackageInfo(
            old_version=old_version, new_version=new_version
        )
    return dict(sorted(result.items()))


def parse_target_upgrade_list(output: str) -> TransactionInfo:
    """Return the transaction targets and the total download size."""
    packages = []
    number = 0.0
    total = 0.0
    for line in _lines(output):
        fields = line.split(" ")
        pkg = fields[0]
        packages.append(_left(pkg, pkg.rfind("-")))
        if len(fields) == 5:
            number = _to_double(fields[4]) / 1024
        elif len(fields) == 6:
            number = _to_double(fields[5]) / 1024
        total += number

    if total > 1024:
        size = f"{total / 1024:.2f}MB"
    else:
        size = f"{total:.2f}KB"

    return TransactionInfo(packages=sorted(packages), size_to_download=size)


def parse_target_removal_list(output: str) -> list[str]:
    """Return the packages a removal would take away.

    Parsing stops at the first line that is not a removal; what was found
    until then is returned in the order it appeared.
    """
    result = []
    for line in _lines(output):
        if "remove" not in line:
            return result
        space = line.find(" ")
        if space != -1:
            pkg = line[:space]
            result.append(_left(pkg, pkg.rfind("-")))
    return sorted(result)


def _parse_tuples(
    lines: Iterable[str],
    is_installed: Callable[[str], bool],
    install_dates: InstallDateLookup | None,
) -> list[PackageListData]:
    result = []
    name = version = ""
    for line in lines:
        parts = line.split(" ")
        if len(parts) < 2:
            raise ValueError(f"malformed package line: {line!r}")
        split = split_name_version(parts[1])
        if split is not None:
            name, version = split

        if is_installed(parts[0]):
            status = PackageStatus.INSTALLED
            installed_on = install_dates(f"{name}-{version}") if install_dates else ""
        else:
            status = PackageStatus.NON_INSTALLED
            installed_on = ""

        comment = "".join(" " + part for part in parts[2:])
        if comment:
            comment = name + " " + comment
        comment = comment.strip()

        result.append(
            PackageListData(
                name=name,
                origin="",
                version=version,
                comment=comment,
                status=status,
                installed_size=0.0,
                download_size=0.0,
                installed_on=installed_on,
            )
        )
    return result


def parse_package_tuples(
    lines: Iterable[str], install_dates: InstallDateLookup | None = None
) -> list[PackageListData]:
    """Parse search result lines; a status containing "*" means installed."""
    return _parse_tuples(lines, lambda status: "*" in status, install_dates)


def parse_package_list(
    output: str, install_dates: InstallDateLookup | None = None
) -> list[PackageListData]:
    """Parse a full package listing of installed and available packages."""
    return _parse_tuples(
        _lines(output), lambda status: status in _INSTALLED_MARKERS, install_dates
    )


def parse_remote_package_list(
    search: str, output: str, install_dates: InstallDateLookup | None = None
) -> list[PackageListData]:
    """Parse a remote search listing; an empty search gives no packages."""
    if not search:
        return []
    return parse_package_tuples(_lines(output), install_dates)


def build_file_tree(output: str) -> list[str]:
    """Return a package's files together with every parent directory, sorted."""
    files = _lines(output)
    directories: list[str] = []
    seen: set[str] = set()
    for line in files:
        parts = [part for part in line.split("/") if part]
        if not parts:
            continue
        path = ""
        for part in parts[: max(1, len(parts) - 1)]:
            path += "/" + part
            directory = path + "/"
            if directory not in seen:
                seen.add(directory)
                directories.append(directory)
    return sorted(files + directories)


def cached_package_path(
    pkg_name_version: str, arch: str | None = None, cache_dir: str | Path = DEFAULT_CACHE_DIR
) -> Path:
    """Return where the package archive lives in the local cache."""
    machine = arch if arch is not None else platform.machine()
    return Path(cache_dir) / f"{pkg_name_version}.{machine}.xbps"


def package_install_date(
    pkg_name_version: str, arch: str | None = None, cache_dir: str | Path = DEFAULT_CACHE_DIR
) -> str:
    """Return the cached archive's modification time in epoch seconds, or ""."""
    path = cached_package_path(pkg_name_version, arch, cache_dir)
    if not path.exists():
        return ""
    return str(int(path.stat().st_mtime))


def has_xbps_database(db_dir: str | Path = DEFAULT_DB_DIR) -> bool:
    """Return True if the package database directory holds a pkgdb file."""
    directory = Path(db_dir)
    if not directory.is_dir():
        return False
    return any(
        entry.is_file() and fnmatch.fnmatch(entry.name, XBPS_CORE_DB_FILE)
        for entry in directory.iterdir()
    )