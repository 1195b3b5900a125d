"""
Resolver for toolpath.

The resolver answers the three questions callers ask about the namespace:

    lookup(path)          which entry should handle this command?
    tool_defined(path)    has this path already been loaded anywhere?
    list_subtools(path)   what lives below this collection?

Precedence is decided per name path, never per root: for each candidate
prefix (longest first) the roots are consulted in priority order and the
first root that defines that exact prefix wins outright. A higher-priority
root therefore overrides only the paths it actually defines.

Broken definition files are never skipped. A load error in a high-priority
root is raised rather than falling through to a lower one.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from toolpath.cache import DefinitionCache
from toolpath.errors import AliasCycleError
from toolpath.roots import RootRegistry
from toolpath.schema import (
    Alias,
    Entry,
    NamePath,
    Root,
    format_name_path,
    make_name_path,
    root_collection,
)
from toolpath.settings import LookupSettings
from toolpath.sink import DefinitionInterpreter
from toolpath.translator import PathTranslator

logger = logging.getLogger(__name__)

PathLike = Union[str, Iterable[str]]


@dataclass(frozen=True)
class Resolution:
    """
    Result of resolving a name path.

    Attributes:
        entry: The entry that handles the path
        remaining: Query segments past the matched entry
    """

    entry: Entry
    remaining: NamePath = ()


class Resolver:
    """
    Priority- and prefix-aware search over a root registry.

    Attributes:
        registry: Roots in priority order
        cache: Lazily loaded definitions

    Example:
        >>> resolver = Resolver()
        >>> resolver.registry.prepend_paths("./tools")
        >>> resolver.lookup("db.migrate").short_desc
        'Apply pending migrations'
    """

    def __init__(self, registry: RootRegistry | None = None, cache: DefinitionCache | None = None) -> None:
        self.registry = registry if registry is not None else RootRegistry()
        self.cache = cache if cache is not None else DefinitionCache()

    @classmethod
    def from_settings(
        cls,
        settings: LookupSettings,
        interpreter: DefinitionInterpreter | None = None,
    ) -> Resolver:
        """
        Build a resolver whose translator follows settings.

        Roots listed in settings are registered so that the first one listed
        has the highest priority.
        """
        registry = RootRegistry()
        registry.prepend(*(Root(path=spec.path, kind=spec.kind) for spec in settings.roots))
        cache = DefinitionCache(translator=PathTranslator(settings), interpreter=interpreter)
        return cls(registry=registry, cache=cache)

    # -------------------------------------------------------------------------
    # Root registration
    # -------------------------------------------------------------------------

    def prepend_paths(self, *paths: Path | str) -> None:
        """Register directory hierarchies ahead of every existing root."""
        self.registry.prepend_paths(*paths)

    def prepend_config_paths(self, *paths: Path | str) -> None:
        """Register single definition files ahead of every existing root."""
        self.registry.prepend_config_paths(*paths)

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def lookup(self, path: PathLike) -> Entry:
        """
        Return the entry that handles path.

        Falls back to the nearest defined ancestor collection, and finally
        to an empty root collection, so this never returns None.

        Raises:
            AliasCycleError: If following aliases revisits a path
            DefinitionError: If a required definition file fails to load
        """
        return self.resolve(path).entry

    def resolve(self, path: PathLike) -> Resolution:
        """
        Like lookup(), but also report the unmatched trailing segments.

        Aliases are followed: the alias target plus any unmatched segments
        is resolved again.
        """
        query = make_name_path(path)
        chain = [query]
        followed: set[tuple[Root | None, NamePath]] = set()
        while True:
            entry, remaining = self._search(query)
            if not isinstance(entry, Alias):
                return Resolution(entry=entry, remaining=remaining)

            # Each alias entry may be followed once per resolution.
            key = (entry.root, entry.full_name)
            if key in followed:
                raise AliasCycleError(
                    name=format_name_path(chain[0]),
                    chain=[format_name_path(p) for p in chain],
                )
            followed.add(key)

            query = entry.target + remaining
            logger.debug("Alias '%s' -> '%s'", format_name_path(entry.full_name), format_name_path(query))
            chain.append(query)

    def _search(self, path: NamePath) -> tuple[Entry, NamePath]:
        roots = self.registry.roots
        for k in range(len(path), -1, -1):
            prefix = path[:k]
            for root in roots:
                if self.cache.has_entry(root, prefix):
                    return self.cache.get(root, prefix), path[k:]
        return root_collection(), path

    def tool_defined(self, path: PathLike) -> bool:
        """
        Report whether any root has already loaded an entry at path.

        Never triggers a load, so it can be used to observe laziness.
        """
        name = make_name_path(path)
        return any(self.cache.is_registered(root, name) for root in self.registry)

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    def list_subtools(self, path: PathLike = (), recursive: bool = False, search: str | None = None) -> list[Entry]:
        """
        List the entries below path.

        Each name appears once, described by the highest-priority root that
        defines it.

        Args:
            path: Collection to list
            recursive: Include all descendants, not only immediate children
            search: Keep only entries mentioning this word in their name or
                descriptions (case-insensitive)

        Returns:
            Entries sorted by full name
        """
        parent = make_name_path(path)
        found: dict[NamePath, Entry] = {}
        for root in self.registry:
            for name in self.cache.list_children(root, parent, recursive):
                if name not in found:
                    found[name] = self.cache.get(root, name)

        entries = [found[name] for name in sorted(found)]
        if search:
            pattern = re.compile(rf"(^|\s){re.escape(search)}(\s|$)", re.IGNORECASE)
            entries = [e for e in entries if _matches(e, pattern)]
        return entries

    def __repr__(self) -> str:
        roots = ", ".join(str(r) for r in self.registry)
        return f"<Resolver: [{roots}] loads={self.cache.load_count}>"


def _matches(entry: Entry, pattern: re.Pattern[str]) -> bool:
    texts = [entry.display_name, *entry.desc, *entry.long_desc]
    return any(pattern.search(text) for text in texts)
