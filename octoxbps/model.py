"""Filtered, sortable view of the packages held by a repository."""

from __future__ import annotations

import locale
import re
from enum import Enum, IntEnum
from functools import cmp_to_key
from typing import Callable

from octoxbps.package import (
    PKGNG_FAKE_REPOSITORY,
    PackageStatus,
    ViewOptions,
    kbytes_to_size,
)
from octoxbps.repository import PackageData, PackageRepository
from octoxbps.vercmp import rpmvercmp

NAME_HEADER = "Name"
VERSION_HEADER = "Version"
ALL_REPOSITORIES = "All"


class Column(IntEnum):
    """Columns of the package view, plus pseudo columns used for filtering."""

    ICON = 0
    NAME = 1
    VERSION = 2
    INSTALLED_ON = 3
    SIZE = 4
    DESCRIPTION_FILTER = 5


class SortOrder(Enum):
    """Direction in which rows are presented."""

    ASCENDING = 0
    DESCENDING = 1


class Icon(Enum):
    """Icon shown for a package in the icon column."""

    NOT_INSTALLED = "not-installed"
    INSTALLED = "installed"
    INSTALLED_UNREQUIRED = "installed-unrequired"
    NEWER = "newer"
    OUTDATED = "outdated"
    FOREIGN = "foreign"
    FOREIGN_OUTDATED = "foreign-outdated"


Less = Callable[[PackageData, PackageData], bool]


def _latin1(text: str) -> str:
    return text.encode("latin-1", "replace").decode("latin-1")


def _less_by_status(a: PackageData, b: PackageData) -> bool:
    if a.status < b.status:
        return True
    if a.status == b.status:
        if a.outdated() and b.outdated():
            return a.name < b.name
        if a.required < b.required:
            return True
        if a.required == b.required:
            return locale.strcoll(a.name, b.name) < 0
    return False


def _less_by_version(a: PackageData, b: PackageData) -> bool:
    cmp = rpmvercmp(_latin1(a.version), _latin1(b.version))
    if cmp < 0:
        return True
    if cmp == 0:
        return a.name < b.name
    return False


def _less_by_size(a: PackageData, b: PackageData) -> bool:
    installed = a.repository != PKGNG_FAKE_REPOSITORY
    size_a = a.installed_size if installed else a.download_size
    size_b = b.installed_size if installed else b.download_size
    mag_a = kbytes_to_size(size_a).split(" ")[1]
    mag_b = kbytes_to_size(size_b).split(" ")[1]
    if mag_a == mag_b:
        if size_a < size_b:
            return True
        if size_a == size_b:
            return a.name < b.name
        return False
    return mag_a < mag_b


def _less_by_installed_on(a: PackageData, b: PackageData) -> bool:
    if a.installed_on < b.installed_on:
        return True
    if a.installed_on == b.installed_on:
        return a.name < b.name
    return False


def _key(less: Less):
    def compare(a: PackageData, b: PackageData) -> int:
        if less(a, b):
            return -1
        if less(b, a):
            return 1
        return 0

    return cmp_to_key(compare)


_SORTERS: dict[int, Less] = {
    Column.ICON: _less_by_status,
    Column.VERSION: _less_by_version,
    Column.SIZE: _less_by_size,
    Column.INSTALLED_ON: _less_by_installed_on,
}


class PackageModel:
    """Rows of packages taken from a repository, filtered and sorted.

    Register the model with the repository so it is rebuilt on every reset.
    """

    def __init__(self, repository: PackageRepository) -> None:
        self._repository = repository
        self._installed_count = 0
        self._packages: list[PackageData] = []
        self._sorted: list[PackageData] = []
        self._sort_order = SortOrder.ASCENDING
        self._sort_column: int = Column.NAME
        self._filter_installed = False
        self._filter_not_installed = False
        self._filter_group = ""
        self._filter_repo = ""
        self._filter_column: int = -1
        self._filter_pattern = ""
        self._filter_regex: re.Pattern[str] | None = re.compile("", re.IGNORECASE)

    @property
    def sort_column(self) -> int:
        return self._sort_column

    @property
    def sort_order(self) -> SortOrder:
        return self._sort_order

    @property
    def filter_column(self) -> int:
        return self._filter_column

    @property
    def filter_expression(self) -> str:
        return self._filter_pattern

    def row_count(self) -> int:
        """Number of visible rows."""
        return len(self._sorted)

    def column_count(self) -> int:
        """Number of displayed columns."""
        return 3

    def data(self, row: int, column: int):
        """Return the icon or text shown at a cell, or None for no content."""
        package = self.get_data(row)
        if package is None:
            return None
        if column == Column.ICON:
            return self.icon_for(package)
        if column == Column.NAME:
            return package.name
        if column == Column.VERSION:
            return package.version
        if column == Column.SIZE:
            size = package.installed_size if package.installed() else package.download_size
            return kbytes_to_size(size)
        raise ValueError(f"column {column} has no display data")

    def header_data(self, section: int):
        """Return the header of a column; unnamed columns give their number."""
        if section == Column.ICON:
            return None
        if section == Column.NAME:
            return NAME_HEADER
        if section == Column.VERSION:
            return VERSION_HEADER
        return section

    def sort(self, column: int, order: SortOrder) -> None:
        """Sort by a column in the given order, if either changed."""
        if column != self._sort_column or order != self._sort_order:
            self._sort_column = column
            self._sort_order = order
            self._apply_sort()

    def clear(self) -> None:
        """Drop all rows."""
        self._packages = []
        self._sorted = []

    def begin_reset_repository(self) -> None:
        """Drop all rows before the repository changes."""
        self._packages = []
        self._sorted = []

    def _matches(self, package: PackageData) -> bool:
        if self._filter_repo and package.repository != self._filter_repo:
            return False
        if not self._filter_pattern:
            return True
        if self._filter_column == Column.NAME:
            text = package.name
        elif self._filter_column == Column.DESCRIPTION_FILTER:
            text = package.comment
        else:
            return True
        return self._filter_regex is not None and self._filter_regex.search(text) is not None

    def end_reset_repository(self) -> None:
        """Rebuild the rows from the repository after it changed."""
        self._packages = [
            pkg
            for pkg in self._repository.package_list(self._filter_group)
            if self._matches(pkg)
        ]
        self._installed_count = sum(1 for pkg in self._packages if pkg.installed())
        self._sorted = list(self._packages)
        self._apply_sort()

    def package_count(self) -> int:
        """Number of packages passing the filters."""
        return len(self._packages)

    def installed_packages_count(self) -> int:
        """Number of installed packages passing the filters."""
        return self._installed_count

    def is_filtered(self) -> bool:
        """True if a status, group or repository filter is active."""
        return bool(
            self._filter_installed
            or self._filter_not_installed
            or self._filter_group
            or self._filter_repo
        )

    def get_data(self, row: int) -> PackageData | None:
        """Return the package shown at a row, or None if there is none."""
        if not 0 <= row < len(self._sorted):
            return None
        if self._sort_order is SortOrder.ASCENDING:
            return self._sorted[row]
        return self._sorted[len(self._packages) - row - 1]

    def apply_view_filter(self, view_options: ViewOptions, repo: str, group: str) -> None:
        """Filter by installation state, repository and group."""
        self.begin_reset_repository()
        self._filter_not_installed = view_options is ViewOptions.NON_INSTALLED_PKGS
        self._filter_installed = view_options is ViewOptions.INSTALLED_PKGS
        self._filter_group = group
        repository = repo.replace("&", "")
        if repository == ALL_REPOSITORIES:
            repository = ""
        self._filter_repo = repository
        self.end_reset_repository()

    def apply_install_filter(self, packages_not_installed: bool, group: str) -> None:
        """Filter by the not-installed flag and group."""
        self.begin_reset_repository()
        self._filter_not_installed = packages_not_installed
        self._filter_group = group
        self.end_reset_repository()

    def apply_filter(self, column: int, expression: str) -> None:
        """Filter rows whose column matches a case-insensitive expression.

        An expression that is not a valid regular expression matches nothing.
        """
        if expression is None:
            raise ValueError("filter expression must not be None")
        self.begin_reset_repository()
        self._filter_column = column
        self._filter_pattern = expression
        try:
            self._filter_regex = re.compile(expression, re.IGNORECASE)
        except re.error:
            self._filter_regex = None
        self.end_reset_repository()

    def set_filter_column(self, column: int) -> None:
        """Change the filtered column, keeping the expression."""
        self.apply_filter(column, self._filter_pattern)

    def set_filter_expression(self, expression: str) -> None:
        """Change the filter expression, keeping the column."""
        self.apply_filter(self._filter_column, expression)

    def icon_for(self, package: PackageData) -> Icon:
        """Return the icon matching a package's status."""
        status = package.status
        if status is PackageStatus.FOREIGN:
            return Icon.FOREIGN
        if status is PackageStatus.FOREIGN_OUTDATED:
            return Icon.FOREIGN_OUTDATED
        if status is PackageStatus.OUTDATED:
            return Icon.OUTDATED
        if status is PackageStatus.NEWER:
            return Icon.NEWER
        if status is PackageStatus.INSTALLED:
            return Icon.INSTALLED if package.required else Icon.INSTALLED_UNREQUIRED
        if status is PackageStatus.NON_INSTALLED:
            return Icon.NOT_INSTALLED
        raise ValueError(f"unknown package status {status!r}")

    def _apply_sort(self) -> None:
        if self._sort_column == Column.NAME:
            self._sorted = list(self._packages)
            return
        less = _SORTERS.get(self._sort_column)
        if less is not None:
            self._sorted.sort(key=_key(less))