"""
Registration sink for toolpath.

The sink is the only surface a definition interpreter sees. The cache hands
one sink to every load action; the interpreter evaluates a file and reports
what it found through register_tool(), register_collection() and
register_alias(). Nothing reaches the cache until the whole load action has
been evaluated and commit() is called, so a failing file never leaves
partial results behind.

Paths given to the sink are relative to the file being evaluated
(sink.prefix). Alias targets are absolute.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, TypeVar, Union

from toolpath.errors import DuplicateDefinitionError
from toolpath.schema import (
    Alias,
    ArgDefinition,
    Collection,
    Entry,
    FlagDefinition,
    NamePath,
    Root,
    Tool,
    format_name_path,
    make_name_path,
)

if TYPE_CHECKING:
    from toolpath.cache import DefinitionCache

PathLike = Union[str, Iterable[str]]
Lines = Union[str, Iterable[str], None]
EntryT = TypeVar("EntryT", bound=Entry)


class DefinitionInterpreter(Protocol):
    """Turns the content of one definition file into registrations."""

    def evaluate(self, source: Path, sink: RegistrationSink) -> None:
        """Evaluate source, reporting every entry it defines to sink."""
        ...


def as_lines(value: Lines) -> tuple[str, ...]:
    """Normalize a description to a tuple of lines."""
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(value.splitlines()) if value else ()
    return tuple(str(line) for line in value)


class RegistrationSink:
    """
    Collects the entries produced by one load action.

    Attributes:
        root: Root the load belongs to
        prefix: Name path of the file currently being evaluated
        source_path: File currently being evaluated
        index: Whether the current file is an index/config file
    """

    def __init__(self, cache: DefinitionCache, root: Root) -> None:
        self._cache = cache
        self.root = root
        self.prefix: NamePath = ()
        self.source_path: Path | None = None
        self.index = False
        self._staged: dict[NamePath, Entry] = {}

    @contextmanager
    def evaluating(self, prefix: NamePath, source_path: Path, index: bool) -> Iterator[RegistrationSink]:
        """Point the sink at one definition file for the duration of the block."""
        self.prefix, self.source_path, self.index = prefix, source_path, index
        try:
            yield self
        finally:
            self.prefix, self.source_path, self.index = (), None, False

    @property
    def staged(self) -> tuple[Entry, ...]:
        """Entries registered so far and not yet committed."""
        return tuple(self._staged.values())

    def register_tool(
        self,
        path: PathLike,
        desc: Lines = None,
        long_desc: Lines = None,
        flags: Iterable[FlagDefinition] = (),
        args: Iterable[ArgDefinition] = (),
        source_path: Path | None = None,
        run: str | None = None,
    ) -> Tool:
        """Register an invocable tool."""
        tool = Tool(
            full_name=self._absolute(path),
            desc=as_lines(desc),
            long_desc=as_lines(long_desc),
            flags=tuple(flags),
            args=tuple(args),
            run=run,
            source_path=source_path or self.source_path,
            root=self.root,
        )
        return self._stage(tool)

    def register_collection(
        self,
        path: PathLike,
        desc: Lines = None,
        long_desc: Lines = None,
        source_path: Path | None = None,
    ) -> Collection:
        """Register an explicitly declared collection."""
        collection = Collection(
            full_name=self._absolute(path),
            desc=as_lines(desc),
            long_desc=as_lines(long_desc),
            source_path=source_path or self.source_path,
            root=self.root,
        )
        return self._stage(collection)

    def register_alias(self, path: PathLike, target_path: PathLike, desc: Lines = None) -> Alias:
        """Register an alias pointing at an absolute target path."""
        alias = Alias(
            full_name=self._absolute(path),
            target=make_name_path(target_path),
            desc=as_lines(desc),
            source_path=self.source_path,
            root=self.root,
        )
        return self._stage(alias)

    def commit(self) -> None:
        """
        Move every staged entry into the cache.

        All entries are checked before any is written, so the commit either
        applies completely or not at all.

        Raises:
            DuplicateDefinitionError: If the cache gained one of the staged
                paths since it was staged
        """
        for entry in self._staged.values():
            if self._cache.is_registered(self.root, entry.full_name):
                raise self._duplicate(entry)
        for entry in self._staged.values():
            self._cache.register(self.root, entry.full_name, entry)
        self._staged.clear()

    def _absolute(self, path: PathLike) -> NamePath:
        return self.prefix + make_name_path(path)

    def _stage(self, entry: EntryT) -> EntryT:
        name = entry.full_name
        if name in self._staged or self._cache.is_registered(self.root, name):
            raise self._duplicate(entry)
        self._staged[name] = entry
        return entry

    def _duplicate(self, entry: Entry) -> DuplicateDefinitionError:
        return DuplicateDefinitionError(
            name=format_name_path(entry.full_name),
            root_path=str(self.root.path),
            source_path=str(entry.source_path) if entry.source_path else None,
        )
