# octoxbps

Building blocks for a front-end to the XBPS package manager. The package has
parsers for the text that the XBPS tools print, a version comparison, an
in-memory package repository, a sortable and filterable package list model,
and a checkable selection list. You pass in output you already have, and the
package returns structured data.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

- `octoxbps.package` defines the data classes `PackageListData`,
  `PackageInfoData`, `TransactionInfo` and `OutdatedPackageInfo`, and the
  enums `PackageStatus`, `PackageAnchor` and `ViewOptions`. It also has these
  text helpers:
  - `get_base_name`
  - `kbytes_to_size`, `str_to_kbytes`, `str_to_kbytes2`
  - `extract_field`, `parse_information`, `get_url`, `make_url_clickable`
  - `format_dependencies`, `get_optional_deps`
  - `parse_search_string`, `extract_pkg_name_from_anchor`
  - `is_forbidden`, which returns True for `base-files`, `base-system`,
    `libxbps`, `xbps` and `xbps-triggers`
- `octoxbps.vercmp` has `rpmvercmp(a, b)`. It returns `1` when `a` is newer,
  `0` when both are the same version, and `-1` when `b` is newer.
- `octoxbps.listparse` parses tool output:
  - package lists: `parse_package_list`, `parse_package_tuples` and
    `parse_remote_package_list`
  - outdated packages: `parse_outdated_list`
  - upgrade and removal targets: `parse_target_upgrade_list` and
    `parse_target_removal_list`
  - unrequired packages: `parse_unrequired_list`
  - a package's file list, with every parent directory added: `build_file_tree`
  - name and version splitting: `split_name_version` and `version_from_pkgver`

  It also has filesystem helpers that only read files:
  `cached_package_path`, `package_install_date` and `has_xbps_database`.
- `octoxbps.repository` defines `PackageRepository`, the central store of
  `PackageData` entries. It holds package `Group`s and tells every registered
  `RepositoryListener` before and after each change.
- `octoxbps.model` defines `PackageModel`. It is a table over a repository,
  sorted by a `Column` in a `SortOrder`, filtered by view options, repository,
  group or a case-insensitive expression. Each package has an `Icon` that
  reflects its status.
- `octoxbps.selection` defines `MultiSelection`. It is a checkable list of
  candidate packages, and its checked entries are returned as
  `repository/name`.

## Example

```python
from octoxbps.vercmp import rpmvercmp
from octoxbps.listparse import parse_package_list
from octoxbps.repository import PackageRepository
from octoxbps.model import PackageModel, Column

assert rpmvercmp("1.10", "1.9") == 1

packages = parse_package_list("[*] bash-5.2_1 The GNU Bourne Again Shell\n")
repo = PackageRepository()
model = PackageModel(repo)
repo.register_dependency(model)   # the model rebuilds its rows on every reset
repo.set_data(packages, set())
print(model.row_count(), model.data(0, Column.NAME))   # 1 bash
```

## What it does not do

This package does not run the XBPS tools and does not change the system. It
has no command-line program and no graphical interface. Installing, removing,
upgrading and syncing packages is left to the caller. The caller collects the
tool output and passes it to the parsers here.