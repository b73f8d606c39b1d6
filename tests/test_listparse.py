import os

import pytest

from octoxbps.listparse import (
    build_file_tree,
    cached_package_path,
    has_xbps_database,
    package_install_date,
    parse_outdated_list,
    parse_package_list,
    parse_package_tuples,
    parse_remote_package_list,
    parse_target_removal_list,
    parse_target_upgrade_list,
    parse_unrequired_list,
    split_name_version,
    version_from_pkgver,
)
from octoxbps.package import OutdatedPackageInfo, PackageStatus


def test_split_name_version_uses_last_dash():
    assert split_name_version("foo-bar-1.0_1") == ("foo-bar", "1.0_1")


def test_split_name_version_without_dash():
    assert split_name_version("nodash") is None


def test_version_from_pkgver():
    assert version_from_pkgver("foo-bar-1.0_1") == "1.0_1"
    assert version_from_pkgver("1.0_1") == "1.0_1"


def test_parse_unrequired_list():
    output = "foo-1.0_1\nbar-baz-2_1\n\nnodash\n"
    assert parse_unrequired_list(output) == {"foo", "bar-baz"}


def test_parse_outdated_list():
    output = (
        "zlib-1.3_1 update x86_64 repo 100 200\n"
        "bash-5.2_1 install x86_64 repo 100 200\n"
        "curl-8.0_2 update x86_64 repo 100 200\n"
    )
    result = parse_outdated_list(output, {"zlib": "zlib-1.2_1"})
    assert list(result) == ["curl", "zlib"]
    assert result["zlib"] == OutdatedPackageInfo(old_version="1.2_1", new_version="1.3_1")
    assert result["curl"] == OutdatedPackageInfo(old_version="", new_version="8.0_2")


def test_parse_target_upgrade_list_kilobytes():
    output = "zlib-1.3_1 install x86_64 repo 1024\nbash-5.2_1 install x86_64 repo 2048\n"
    info = parse_target_upgrade_list(output)
    assert info.packages == ["bash", "zlib"]
    assert info.size_to_download == "3.00KB"


def test_parse_target_upgrade_list_megabytes():
    output = "big-1.0_1 update x86_64 repo 0 2097152\n"
    info = parse_target_upgrade_list(output)
    assert info.packages == ["big"]
    assert info.size_to_download == "2.00MB"


def test_parse_target_upgrade_list_empty():
    info = parse_target_upgrade_list("")
    assert info.packages == []
    assert info.size_to_download.endswith("KB")


def test_parse_target_removal_list_sorted():
    output = "zlib-1.3_1 remove x86_64\nbash-5.2_1 remove x86_64\n"
    assert parse_target_removal_list(output) == ["bash", "zlib"]


def test_parse_target_removal_list_stops_at_non_removal_line():
    output = "zlib-1.3_1 remove x86_64\nbash-5.2_1 remove x86_64\nsomething else\n"
    assert parse_target_removal_list(output) == ["zlib", "bash"]


def test_parse_target_removal_list_first_line_not_removal():
    assert parse_target_removal_list("nothing here\nfoo-1_1 remove\n") == []


def test_parse_package_tuples_status_and_comment():
    calls = []

    def dates(name_version):
        calls.append(name_version)
        return "42"

    result = parse_package_tuples(
        ["[*] foo-1.0_1 A tool", "[-] bar-2.0_1 Other"], dates
    )
    assert [p.name for p in result] == ["foo", "bar"]
    assert [p.version for p in result] == ["1.0_1", "2.0_1"]
    assert result[0].status is PackageStatus.INSTALLED
    assert result[0].installed_on == "42"
    assert result[1].status is PackageStatus.NON_INSTALLED
    assert result[1].installed_on == ""
    assert calls == ["foo-1.0_1"]
    assert result[0].comment == "foo  A tool"


def test_parse_package_tuples_without_description():
    result = parse_package_tuples(["[-] bar-2.0_1"])
    assert result[0].comment == ""


def test_parse_package_tuples_malformed_line():
    with pytest.raises(ValueError):
        parse_package_tuples(["[*]"])


@pytest.mark.parametrize("marker", ["[*]", "i", "ii"])
def test_parse_package_list_installed_markers(marker):
    result = parse_package_list(f"{marker} foo-1.0_1 desc\n")
    assert result[0].status is PackageStatus.INSTALLED


def test_parse_package_list_not_installed_and_empty():
    result = parse_package_list("[-] foo-1.0_1 desc\n\n")
    assert len(result) == 1
    assert result[0].status is PackageStatus.NON_INSTALLED
    assert parse_package_list("") == []


def test_parse_remote_package_list_requires_search():
    output = "[*] foo-1.0_1 desc\n"
    assert parse_remote_package_list("", output) == []
    result = parse_remote_package_list("foo", output)
    assert [p.name for p in result] == ["foo"]


def test_build_file_tree_adds_parent_directories():
    output = "/usr/bin/foo\n/usr/share/doc/foo/README\n"
    tree = build_file_tree(output)
    assert tree == sorted(tree)
    assert len(tree) == len(set(tree))
    assert set(tree) == {
        "/usr/bin/foo",
        "/usr/share/doc/foo/README",
        "/usr/",
        "/usr/bin/",
        "/usr/share/",
        "/usr/share/doc/",
        "/usr/share/doc/foo/",
    }


def test_cached_package_path():
    path = cached_package_path("foo-1.0_1", "x86_64", "/cache")
    assert path.name == "foo-1.0_1.x86_64.xbps"
    assert str(path.parent) == "/cache"


def test_package_install_date(tmp_path):
    archive = tmp_path / "foo-1.0_1.x86_64.xbps"
    archive.write_bytes(b"")
    os.utime(archive, (1700000000, 1700000000))
    assert package_install_date("foo-1.0_1", "x86_64", tmp_path) == "1700000000"
    assert package_install_date("bar-1.0_1", "x86_64", tmp_path) == ""


def test_has_xbps_database(tmp_path):
    assert has_xbps_database(tmp_path) is False
    (tmp_path / "pkgdb-0.38.plist").mkdir()
    assert has_xbps_database(tmp_path) is False
    (tmp_path / "pkgdb-0.38.plist").rmdir()
    (tmp_path / "pkgdb-0.38.plist").write_text("")
    assert has_xbps_database(tmp_path) is True
    assert has_xbps_database(tmp_path / "missing") is False