"""Choosing several packages out of a list, as for optional or dependent packages."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class _Row:
    name: str
    description: str
    repository: str
    checked: bool = False


class MultiSelection:
    """A list of candidate packages, each of which can be checked or not.

    Packages are added unchecked. ``toggle_all`` alternates between checking
    and unchecking every package, starting with checking; ``select_all``
    checks everything and makes the next toggle uncheck.
    """

    def __init__(self) -> None:
        self._rows: list[_Row] = []
        self._action_is_to_check = True

    def __len__(self) -> int:
        return len(self._rows)

    def add_package(self, name: str, description: str, repository: str) -> None:
        """Append an unchecked package to the list."""
        self._rows.append(_Row(name, description, repository))

    def is_checked(self, row: int) -> bool:
        """Return whether the package at a row is checked."""
        return self._row(row).checked

    def set_checked(self, row: int, checked: bool) -> None:
        """Check or uncheck the package at a row."""
        self._row(row).checked = checked

    def selected_packages(self) -> list[str]:
        """Return the checked packages as "repository/name", in list order."""
        return [f"{row.repository}/{row.name}" for row in self._rows if row.checked]

    def select_all(self) -> None:
        """Check every package; the next toggle will uncheck them all."""
        self._action_is_to_check = False
        for row in self._rows:
            row.checked = True

    def toggle_all(self) -> None:
        """Check or uncheck every package, alternating on each call."""
        for row in self._rows:
            row.checked = self._action_is_to_check
        self._action_is_to_check = not self._action_is_to_check

    def _row(self, row: int) -> _Row:
        if not 0 <= row < len(self._rows):
            raise IndexError(f"no package at row {row}")
        return self._rows[row]