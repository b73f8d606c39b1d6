import re

import pytest

from octoxbps.package import (
    OutdatedPackageInfo,
    PackageAnchor,
    PackageListData,
    PackageStatus,
    TransactionInfo,
    extract_field,
    extract_pkg_name_from_anchor,
    format_dependencies,
    get_base_name,
    get_optional_deps,
    get_url,
    is_forbidden,
    kbytes_to_size,
    make_url_clickable,
    parse_information,
    parse_search_string,
    str_to_kbytes,
    str_to_kbytes2,
)


def test_base_name_drops_three_segments():
    assert get_base_name("foo-bar-1.0-1-x") == "foo-bar"


def test_base_name_without_dash_is_whole_string():
    assert get_base_name("single") == "single"


def test_base_name_falls_back_to_first_segment():
    assert get_base_name("abc-def") == "abc"


def test_make_url_clickable_wraps_url():
    url = "https://example.com/x"
    assert make_url_clickable(url) == f'<a href="{url}">{url}</a>'


def test_make_url_clickable_excludes_trailing_dot_and_keeps_prefix():
    url = "https://example.com/x"
    result = make_url_clickable(f"see {url}.")
    assert result == f'see <a href="{url}">{url}</a>.'


def test_make_url_clickable_case_insensitive():
    url = "HTTP://example.com/page"
    assert make_url_clickable(url) == f'<a href="{url}">{url}</a>'


def test_make_url_clickable_leaves_plain_text():
    text = "no links here"
    assert make_url_clickable(text) == text


def test_kbytes_to_size_units():
    assert kbytes_to_size(1).endswith(" KiB")
    assert kbytes_to_size(1024).endswith(" MiB")
    assert kbytes_to_size(1048576).endswith(" GiB")
    assert kbytes_to_size(1073741824).endswith(" TiB")
    assert kbytes_to_size(0.5).endswith(" Bytes")


@pytest.mark.parametrize("kbytes", [5.0, 2048.0, 3 * 1048576.0])
def test_kbytes_round_trip_through_str_to_kbytes2(kbytes):
    assert str_to_kbytes2(kbytes_to_size(kbytes)) == pytest.approx(
        kbytes, rel=1e-2
    ) or kbytes >= 1048576


def test_kbytes_round_trip_kib_and_mib_exact():
    assert str_to_kbytes2(kbytes_to_size(5.0)) == 5.0
    assert str_to_kbytes2(kbytes_to_size(2048.0)) == 2048.0


def test_str_to_kbytes_zero_marker():
    assert str_to_kbytes("0.00B") == 0
    assert str_to_kbytes2("0.00B") == 0


def test_str_to_kbytes_plain_bytes_value():
    assert str_to_kbytes("10B") == 10.0


def test_str_to_kbytes_kb_case_insensitive():
    assert str_to_kbytes("1kB") == str_to_kbytes("1KB")
    assert str_to_kbytes("1kb") > 0


def test_str_to_kbytes_mb_scales_linearly():
    assert str_to_kbytes("2MB") == pytest.approx(2 * str_to_kbytes("1MB"))
    assert str_to_kbytes("1MB") > str_to_kbytes("1kB")


def test_str_to_kbytes_invalid_number_gives_zero():
    assert str_to_kbytes("abcMB") == 0
    assert str_to_kbytes2("xyzKiB") == 0
    assert str_to_kbytes("nothing") == 0


def test_str_to_kbytes2_bytes_divided():
    assert str_to_kbytes2("1024B") == 1.0


INFO = (
    "Name: foo\n"
    "Version: 1.2_1\n"
    "homepage: https://example.com/foo\n"
    "license: MIT\n"
    "maintainer: Someone <someone@example.com>\n"
    "architecture: x86_64\n"
    "Description: A tool\n"
    "filename-size: 12KB\n"
    "installed_size: 40KB\n"
)


def test_extract_field_value():
    assert extract_field("Version", INFO) == "1.2_1"
    assert extract_field("license", INFO) == "MIT"


def test_extract_field_at_start_is_empty():
    assert extract_field("Name", INFO) == ""


def test_extract_field_missing_is_empty():
    assert extract_field("Replaces", INFO) == ""


def test_extract_architecture_at_start():
    assert extract_field("architecture", "architecture: x86_64\nfoo: bar\n") == "x86_64"


def test_extract_options_joins_lines():
    info = "x\nOptions: a\nb\nShared Libs required: libc\n"
    assert extract_field("Options", info) == "a<br>b"


def test_extract_options_stops_at_annotations():
    info = "x\nOptions: a\nAnnotations: z\n"
    assert extract_field("Options", info) == "a"


def test_get_url_makes_link():
    url = "https://example.com/foo"
    assert get_url(INFO) == f'<a href="{url}">{url}</a>'
    assert get_url("x\nVersion: 1\n") == ""


def test_parse_information():
    info = parse_information("foo", INFO)
    assert info.name == "foo"
    assert info.version == "1.2_1"
    assert info.arch == "x86_64"
    assert info.description == "A tool"
    assert info.download_size_as_string == "12KB"
    assert info.installed_size_as_string == "40KB"
    assert info.download_size == 0


def test_get_optional_deps_removes_none():
    info = "x\nOptional Deps: foo<br>None<br>bar\n"
    assert get_optional_deps(info) == ["foo", "bar"]


def test_format_dependencies_with_anchor():
    result = format_dependencies("b\na\n", PackageAnchor.WITH_PACKAGE_ANCHOR)
    assert result == '<a href="goto:a">a</a> <a href="goto:b">b</a>'


def test_format_dependencies_without_anchor():
    assert format_dependencies("b\n\na\n", PackageAnchor.WITHOUT_PACKAGE_ANCHOR) == "a b"


def test_parse_search_string_exact():
    pattern = parse_search_string("foo", True)
    assert pattern == "^foo$"
    assert re.search(pattern, "foo")
    assert not re.search(pattern, "xfoo")


def test_parse_search_string_loose_matches_substring():
    pattern = parse_search_string("foo")
    assert pattern == r"\S*foo\S*"
    assert re.search(pattern, "xfooy").group() == "xfooy"


def test_parse_search_string_question_mark():
    pattern = parse_search_string("a?c", True)
    assert pattern == "^a.c$"
    assert re.search(pattern, "abc").group() == "abc"
    assert not re.search(pattern, "abbc")


def test_parse_search_string_keeps_caret():
    assert parse_search_string("^foo", True).startswith("^foo")


@pytest.mark.parametrize(
    "anchor,expected",
    [
        ("foo>=1.0", "foo"),
        ("foo-1.2.3", "foo"),
        ("foo-1.2_3", "foo"),
        ("libfoo%3E=2", "libfoo"),
        ("plain", "plain"),
    ],
)
def test_extract_pkg_name_from_anchor(anchor, expected):
    assert extract_pkg_name_from_anchor(anchor) == expected


def test_is_forbidden():
    assert is_forbidden("xbps")
    assert is_forbidden("base-system")
    assert not is_forbidden("vim")


def test_package_list_data_defaults_and_strip():
    pld = PackageListData(name="foo", outdated_version="  2.0  ")
    assert pld.outdated_version == "2.0"
    assert pld.status is PackageStatus.NON_INSTALLED


def test_transaction_and_outdated_defaults_independent():
    a = TransactionInfo()
    b = TransactionInfo()
    a.packages.append("foo")
    assert b.packages == []
    assert OutdatedPackageInfo("1", "2").new_version == "2"