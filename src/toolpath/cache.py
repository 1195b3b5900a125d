"""
Definition cache for toolpath.

The cache stores entries keyed by (root, name path) and is the only place
definition files get evaluated. Loads happen per (root, prefix): the first
question that needs a prefix loads it, and every later question is answered
from memory.

Load lifecycle per (root, prefix):
    UNLOADED -> LOADING -> LOADED
    LOADING  -> UNLOADED   when a source fails; nothing is committed

Design:
    - Translator decides which files to read, interpreter decides what they mean
    - Entries are committed per load action, all or nothing
    - A directory with no explicit entry gets an implicit collection
"""

from __future__ import annotations

import logging
from enum import Enum

from toolpath.definition import YamlDefinitionInterpreter
from toolpath.errors import DefinitionError, DefinitionLoadError, DuplicateDefinitionError, LoadCycleError
from toolpath.schema import Collection, Entry, NamePath, Root, format_name_path, is_prefix
from toolpath.sink import DefinitionInterpreter, RegistrationSink
from toolpath.translator import DefinitionSource, LoadAction, PathTranslator

logger = logging.getLogger(__name__)


class LoadState(str, Enum):
    """Load progress of one (root, prefix) pair."""

    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"


class DefinitionCache:
    """
    Lazily populated store of entries.

    Attributes:
        translator: Maps name paths to load actions
        interpreter: Evaluates definition files
        load_count: Number of definition files evaluated so far
    """

    def __init__(
        self,
        translator: PathTranslator | None = None,
        interpreter: DefinitionInterpreter | None = None,
    ) -> None:
        self.translator = translator or PathTranslator()
        self.interpreter = interpreter or YamlDefinitionInterpreter()
        self.load_count = 0
        self._entries: dict[Root, dict[NamePath, Entry]] = {}
        self._states: dict[tuple[Root, NamePath], LoadState] = {}
        self._expanded: set[tuple[Root, NamePath, bool]] = set()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def has_entry(self, root: Root, path: NamePath) -> bool:
        """
        Check whether root defines path, loading what is needed first.

        Args:
            root: Root to search
            path: Name path to look for

        Returns:
            True if an entry is registered at (root, path)

        Raises:
            DefinitionError: If a required definition file fails to load
        """
        self.ensure_loaded(root, path)
        return self.is_registered(root, path)

    def is_registered(self, root: Root, path: NamePath) -> bool:
        """Check membership without loading anything."""
        return path in self._entries.get(root, {})

    def get(self, root: Root, path: NamePath) -> Entry | None:
        """Return the entry at (root, path), or None. Never loads."""
        return self._entries.get(root, {}).get(path)

    def state(self, root: Root, prefix: NamePath) -> LoadState:
        """Return the load state of (root, prefix)."""
        return self._states.get((root, prefix), LoadState.UNLOADED)

    def list_children(self, root: Root, path: NamePath, recursive: bool = False) -> set[NamePath]:
        """
        Return the name paths registered below path in root.

        Loads path itself, then the child levels (all descendant levels when
        recursive) that have not been loaded yet.

        Args:
            root: Root to search
            path: Parent name path
            recursive: Include all descendants, not only immediate children

        Returns:
            Set of registered name paths strictly below path
        """
        self.ensure_loaded(root, path)
        if (root, path, True) not in self._expanded and (root, path, recursive) not in self._expanded:
            for action in self.translator.translate_subtree(root, path, recursive):
                self._perform(action)
            self._expanded.add((root, path, recursive))

        depth = len(path)
        return {
            name
            for name in self._entries.get(root, {})
            if len(name) > depth
            and is_prefix(path, name)
            and (recursive or len(name) == depth + 1)
        }

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def ensure_loaded(self, root: Root, path: NamePath) -> None:
        """Load every action needed to answer questions about path and its ancestors."""
        for action in self.translator.translate(root, path):
            self._perform(action)

    def register(self, root: Root, path: NamePath, entry: Entry) -> None:
        """
        Store an entry.

        Raises:
            DuplicateDefinitionError: If (root, path) already has an entry
        """
        entries = self._entries.setdefault(root, {})
        if path in entries:
            raise DuplicateDefinitionError(
                name=format_name_path(path),
                root_path=str(root.path),
                source_path=str(entry.source_path) if entry.source_path else None,
            )
        entries[path] = entry

    def _perform(self, action: LoadAction) -> None:
        key = (action.root, action.prefix)
        state = self._states.get(key, LoadState.UNLOADED)
        if state is LoadState.LOADED:
            return
        if state is LoadState.LOADING:
            raise LoadCycleError(
                name=format_name_path(action.prefix),
                root_path=str(action.root.path),
            )

        self._states[key] = LoadState.LOADING
        sink = RegistrationSink(self, action.root)
        try:
            for source in action.sources:
                self._evaluate(sink, action, source)
            sink.commit()
        except Exception:
            del self._states[key]
            raise

        if action.directory is not None and not self.is_registered(action.root, action.prefix):
            logger.debug("Implicit collection '%s' from %s", format_name_path(action.prefix), action.directory)
            self.register(
                action.root,
                action.prefix,
                Collection(
                    full_name=action.prefix,
                    source_path=action.directory,
                    root=action.root,
                    implicit=True,
                ),
            )
        self._states[key] = LoadState.LOADED

    def _evaluate(self, sink: RegistrationSink, action: LoadAction, source: DefinitionSource) -> None:
        self.load_count += 1
        logger.debug("Loading %s at '%s'", source.path, format_name_path(action.prefix))
        with sink.evaluating(action.prefix, source.path, source.index):
            try:
                self.interpreter.evaluate(source.path, sink)
            except DefinitionError:
                raise
            except Exception as e:
                raise DefinitionLoadError(
                    root_path=str(action.root.path),
                    source_path=str(source.path),
                    underlying_error=str(e),
                ) from e
