"""
Integration Code Registry
=========================
Composite models combine the analytic integration codes of their components
into a single code. The registry maps such a master code back onto the
sequence of component codes.

Master code 0 is reserved for "no analytic integration", so the code handed
out for the entry at position `i` is `i + 1`. Entries are never removed.
"""
from __future__ import annotations

from typing import Iterable

from resolutionmodels.errors import ProgrammingError


class IntegrationCodeRegistry:
    """Append-only store of component integration code sequences."""

    def __init__(self) -> None:
        self._entries: list[tuple[int, ...]] = []

    def __len__(self) -> int:
        return len(self._entries)

    def store(self, sub_codes: Iterable[int]) -> int:
        """
        Register a sequence of component codes.

        An identical sequence that was stored before is not appended again.

        Args:
            sub_codes: One integration code per component, in component order.

        Returns:
            The master code (registry index + 1).
        """
        entry = tuple(int(code) for code in sub_codes)
        try:
            index = self._entries.index(entry)
        except ValueError:
            self._entries.append(entry)
            index = len(self._entries) - 1
        return index + 1

    def retrieve(self, master_code: int) -> tuple[int, ...]:
        """
        Look up the component codes of a master code.

        Raises:
            ProgrammingError: If the code is 0 or was never issued.
        """
        if master_code == 0:
            raise ProgrammingError("Integration code 0 means no analytic integration and has no registry entry.")
        if not 1 <= master_code <= len(self._entries):
            raise ProgrammingError(f"Unrecognized integration code {master_code}.")
        return self._entries[master_code - 1]

    def copy(self) -> IntegrationCodeRegistry:
        """Return a registry holding the same entries."""
        other = IntegrationCodeRegistry()
        other._entries = list(self._entries)
        return other
