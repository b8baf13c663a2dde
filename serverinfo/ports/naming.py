"""Naming port definition (interface)."""

from typing import Protocol

__all__ = ["NamingPort"]


class NamingPort(Protocol):
    """Expands short map and game type codes to display names."""

    def expand_map_name(self, code: str, /) -> str:
        """Return the long map name for ``code`` (or ``code`` itself)."""
        ...

    def expand_game_type(self, code: str, /) -> str:
        """Return the long game type name for ``code`` (or ``code`` itself)."""
        ...
