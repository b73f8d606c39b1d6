"""Central in-memory store of package data, groups and change listeners."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from octoxbps.package import PackageListData, PackageStatus
from octoxbps.vercmp import rpmvercmp

DEFAULT_FOREIGN_GROUP = "Foreign"


@runtime_checkable
class RepositoryListener(Protocol):
    """Something that must be told before and after the repository changes."""

    def begin_reset_repository(self) -> None:
        ...

    def end_reset_repository(self) -> None:
        ...


def _latin1(text: str) -> str:
    return text.encode("latin-1", "replace").decode("latin-1")


@dataclass
class PackageData:
    """One package held by the repository."""

    required: bool
    name: str
    repository: str = ""
    origin: str = ""
    version: str = ""
    description: str = ""
    outdated_version: str = ""
    download_size: float = 0.0
    installed_size: float = 0.0
    installed_on: str = ""
    status: PackageStatus = PackageStatus.NON_INSTALLED
    comment: str = ""
    www: str = ""
    categories: str = ""

    @classmethod
    def from_list_data(cls, pkg: PackageListData, required: bool) -> PackageData:
        """Build from a listing entry; an outdated entry whose available
        version is older than the installed one is marked NEWER."""
        status = pkg.status
        if status is PackageStatus.OUTDATED:
            if rpmvercmp(_latin1(pkg.outdated_version), _latin1(pkg.version)) == 1:
                status = PackageStatus.NEWER
        return cls(
            required=required,
            name=pkg.name,
            repository=pkg.repository,
            origin=pkg.origin,
            version=pkg.version,
            description=_latin1(pkg.description),
            outdated_version=pkg.outdated_version,
            download_size=pkg.download_size,
            installed_size=pkg.installed_size,
            installed_on=pkg.installed_on,
            status=status,
            comment=pkg.comment,
            www=pkg.www,
            categories=pkg.categories,
        )

    def installed(self) -> bool:
        """True unless the package is not installed."""
        return self.status is not PackageStatus.NON_INSTALLED

    def outdated(self) -> bool:
        """True if a different version than the installed one is available."""
        return self.status in (PackageStatus.OUTDATED, PackageStatus.NEWER)


class Group:
    """A named package group and, once loaded, its member packages."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._packages: list[PackageData] | None = None

    @property
    def packages(self) -> list[PackageData] | None:
        """The member packages, or None while the member list is not loaded."""
        return self._packages

    def member_list_equals(self, names: Sequence[str]) -> bool:
        """True if the loaded members have exactly these names, in order."""
        if self._packages is None or len(self._packages) != len(names):
            return False
        return all(pkg.name == name for pkg, name in zip(self._packages, names))

    def add_package(self, package: PackageData) -> None:
        """Append a package to the member list, creating it if needed."""
        if self._packages is None:
            self._packages = []
        self._packages.append(package)

    def invalidate(self) -> None:
        """Forget the member list."""
        self._packages = None


class PackageRepository:
    """Sorted list of all packages, of foreign packages and of groups."""

    def __init__(self, foreign_group_name: str = DEFAULT_FOREIGN_GROUP) -> None:
        self.foreign_group_name = foreign_group_name
        self._listeners: list[RepositoryListener] = []
        self._packages: list[PackageData] = []
        self._foreign_packages: list[PackageData] = []
        self._groups: list[Group] = []

    @property
    def groups(self) -> list[Group]:
        """The package groups, in the order they were set."""
        return list(self._groups)

    def register_dependency(self, listener: RepositoryListener) -> None:
        """Register a listener told about every reset of the repository."""
        self._listeners.append(listener)

    def _begin_reset(self) -> None:
        for listener in self._listeners:
            listener.begin_reset_repository()

    def _end_reset(self) -> None:
        for listener in self._listeners:
            listener.end_reset_repository()

    @staticmethod
    def _build(
        packages: Iterable[PackageListData], unrequired: Iterable[str]
    ) -> list[PackageData]:
        unrequired_names = set(unrequired)
        return [
            PackageData.from_list_data(pkg, pkg.name not in unrequired_names)
            for pkg in packages
        ]

    def set_data(
        self, packages: Iterable[PackageListData], unrequired: Iterable[str]
    ) -> None:
        """Replace all packages; group member lists are invalidated."""
        self._begin_reset()
        for group in self._groups:
            group.invalidate()
        self._foreign_packages = []
        self._packages = sorted(
            self._build(packages, unrequired), key=lambda p: p.name
        )
        self._end_reset()

    def set_foreign_data(
        self, packages: Iterable[PackageListData], unrequired: Iterable[str]
    ) -> None:
        """Add foreign packages to the full list and make them the foreign list."""
        self._begin_reset()
        built = self._build(packages, unrequired)
        self._packages.extend(built)
        self._packages.sort(key=lambda p: p.name)
        self._foreign_packages = sorted(built, key=lambda p: p.name)
        self._end_reset()

    def _group_names_equal(self, names: Sequence[str]) -> bool:
        if len(self._groups) != len(names):
            return False
        return all(group.name == name for group, name in zip(self._groups, names))

    def check_and_set_groups(self, groups: Sequence[str]) -> None:
        """Replace the groups if their names differ from the given ones."""
        if self._group_names_equal(groups):
            return
        self._begin_reset()
        self._groups = [Group(name) for name in groups]
        self._end_reset()

    def check_and_set_members_of_group(
        self, group_name: str, members: Sequence[str]
    ) -> None:
        """Reload a group's members if they differ from the given names.

        Raises KeyError if there is no group of that name.
        """
        group = next((g for g in self._groups if g.name == group_name), None)
        if group is None:
            raise KeyError(f"did not find package group {group_name}")
        if group.member_list_equals(members):
            return

        self._begin_reset()
        group.invalidate()
        for member in members:
            lo = bisect_left(self._packages, member, key=lambda p: p.name)
            hi = bisect_right(self._packages, member, key=lambda p: p.name)
            if lo < hi:
                group.add_package(self._packages[lo])
        self._end_reset()

    def mark_outdated_packages(self, outdated: Iterable[str]) -> None:
        """Mark the named packages outdated and clear their install dates."""
        names = set(outdated)
        self._begin_reset()
        for pkg in self._packages:
            if pkg.name in names:
                pkg.status = PackageStatus.OUTDATED
                pkg.installed_on = ""
        self._packages.sort(key=lambda p: p.name)
        self._end_reset()

    def package_list(self, group: str | None = None) -> list[PackageData]:
        """Return the foreign packages for the foreign group, else all packages."""
        if group is not None and group == self.foreign_group_name:
            return self._foreign_packages
        return self._packages

    def first_package_by_name(self, name: str) -> PackageData | None:
        """Return the first package with this name, or None."""
        return next((pkg for pkg in self._packages if pkg.name == name), None)