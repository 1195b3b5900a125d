"""
Root registry for toolpath.

The registry is the ordered list of places definitions are searched for.
Position encodes priority: the front of the list is searched first.

Design:
    - One ordering rule for both root kinds: the most recent call wins
    - Roots are immutable once added; the registry only grows
    - Missing paths are accepted; they simply contribute nothing

Usage:
    registry = RootRegistry()
    registry.prepend_config_paths("~/.tools.yaml")
    registry.prepend_paths("./tools")   # now searched before the config file
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

from toolpath.schema import Root, RootKind

logger = logging.getLogger(__name__)


class RootRegistry:
    """
    Ordered collection of search roots, highest priority first.

    Attributes:
        _roots: Internal list of roots in priority order
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._roots: list[Root] = []

    def prepend(self, *roots: Root) -> None:
        """
        Insert roots at the front of the search order.

        When several roots are passed they keep their relative order, so the
        first argument ends up with the highest priority.

        Args:
            roots: Root instances to add

        Raises:
            ValueError: If a root is None
        """
        for root in roots:
            if root is None:
                msg = "Cannot register None as a root"
                raise ValueError(msg)
        self._roots[:0] = roots
        for root in roots:
            logger.debug("Registered root %s", root)

    def prepend_paths(self, *paths: Path | str) -> None:
        """Register directory hierarchies mirroring the command namespace."""
        self.prepend(*(self._make_root(p, RootKind.INDEXED_HIERARCHY) for p in paths))

    def prepend_config_paths(self, *paths: Path | str) -> None:
        """Register single definition files (or directories holding one)."""
        self.prepend(*(self._make_root(p, RootKind.SINGLE_FILE) for p in paths))

    @staticmethod
    def _make_root(path: Path | str, kind: RootKind) -> Root:
        return Root(path=Path(path).expanduser().resolve(), kind=kind)

    @property
    def roots(self) -> tuple[Root, ...]:
        """Read-only view of the roots in priority order."""
        return tuple(self._roots)

    def __len__(self) -> int:
        """Return the number of registered roots."""
        return len(self._roots)

    def __iter__(self) -> Iterator[Root]:
        """Iterate over roots, highest priority first."""
        return iter(tuple(self._roots))

    def __contains__(self, root: object) -> bool:
        """Check if a root is registered using 'in' operator."""
        return root in self._roots

    def __repr__(self) -> str:
        """String representation of the registry."""
        roots = ", ".join(str(r) for r in self._roots)
        return f"<RootRegistry: [{roots}]>"
