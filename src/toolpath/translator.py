"""
Path translation for toolpath.

The translator maps a name path to the load actions that could define it,
without reading any file. Two root layouts are supported:

Indexed hierarchy:
    tools/
        .tools.yaml            declares the root collection (optional)
        greet.yaml             defines ("greet",)
        db/                    implies collection ("db",)
            .tools.yaml        declares ("db",) and inline children
            migrate.yaml       defines ("db", "migrate")

Single file:
    .tools.yaml                defines every path in one pass

For a lookup only directories on the path from the root to the target are
inspected. Sibling subtrees are touched only by listing queries through
translate_subtree().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from toolpath.errors import InvalidNamePathError
from toolpath.schema import NamePath, Root, RootKind, validate_segment
from toolpath.settings import LookupSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DefinitionSource:
    """
    One definition file to evaluate.

    Attributes:
        path: File to hand to the interpreter
        index: True for index/config files, whose top level declares a
            collection; False for per-segment files, whose top level
            declares the named entry
    """

    path: Path
    index: bool


@dataclass(frozen=True)
class LoadAction:
    """
    Everything that defines one prefix within one root.

    Attributes:
        root: Root the action belongs to
        prefix: Name path the sources are evaluated at
        sources: Files to evaluate, in order
        directory: Directory implying a collection at prefix, if any
    """

    root: Root
    prefix: NamePath
    sources: tuple[DefinitionSource, ...] = ()
    directory: Path | None = None


class PathTranslator:
    """
    Computes load actions for name paths.

    Attributes:
        settings: File naming conventions
    """

    def __init__(self, settings: LookupSettings | None = None) -> None:
        self.settings = settings or LookupSettings()

    def translate(self, root: Root, path: NamePath) -> list[LoadAction]:
        """
        Return the load actions that can define path or any of its ancestors.

        Actions are ordered shallowest first. The walk stops at the first
        level that has neither a directory nor a definition file, since
        nothing deeper can exist on disk.

        Args:
            root: Root to translate against
            path: Target name path

        Returns:
            Ordered list of load actions (empty if the root is missing)
        """
        if root.kind is RootKind.SINGLE_FILE:
            return self._single_file_actions(root)

        if not root.path.is_dir():
            return []

        actions = [self._directory_action(root, (), root.path)]
        directory: Path | None = root.path
        for depth in range(1, len(path) + 1):
            if directory is None:
                break
            action = self._segment_action(root, path[:depth], directory)
            if action is None:
                break
            actions.append(action)
            directory = action.directory
        return actions

    def translate_subtree(self, root: Root, path: NamePath, recursive: bool) -> list[LoadAction]:
        """
        Return load actions for the children of path.

        The caller is expected to have loaded path itself through translate().
        With recursive=True every descendant level is included, parents
        before children.

        Args:
            root: Root to translate against
            path: Name path whose children are wanted
            recursive: Include all descendants, not only immediate children

        Returns:
            Ordered list of load actions
        """
        if root.kind is RootKind.SINGLE_FILE:
            return self._single_file_actions(root)

        directory = root.path.joinpath(*path)
        if not directory.is_dir():
            return []
        return list(self._walk(root, path, directory, recursive))

    # -------------------------------------------------------------------------
    # Single file roots
    # -------------------------------------------------------------------------

    def config_file(self, root: Root) -> Path:
        """Return the definition file backing a single-file root."""
        if root.path.is_dir():
            return root.path / self.settings.config_file_name
        return root.path

    def _single_file_actions(self, root: Root) -> list[LoadAction]:
        config = self.config_file(root)
        if not config.is_file():
            return []
        return [LoadAction(root=root, prefix=(), sources=(DefinitionSource(config, index=True),))]

    # -------------------------------------------------------------------------
    # Indexed hierarchy roots
    # -------------------------------------------------------------------------

    def _directory_action(self, root: Root, prefix: NamePath, directory: Path) -> LoadAction:
        sources = ()
        index = directory / self.settings.index_file_name
        if index.is_file():
            sources = (DefinitionSource(index, index=True),)
        return LoadAction(root=root, prefix=prefix, sources=sources, directory=directory)

    def _segment_action(self, root: Root, prefix: NamePath, parent: Path) -> LoadAction | None:
        name = prefix[-1]
        definition = parent / f"{name}{self.settings.definition_suffix}"
        directory = parent / name

        sources: list[DefinitionSource] = []
        if definition.is_file() and definition.name != self.settings.index_file_name:
            sources.append(DefinitionSource(definition, index=False))

        if directory.is_dir():
            action = self._directory_action(root, prefix, directory)
            return LoadAction(
                root=root,
                prefix=prefix,
                sources=tuple(sources) + action.sources,
                directory=directory,
            )
        if sources:
            return LoadAction(root=root, prefix=prefix, sources=tuple(sources))
        return None

    def _child_names(self, directory: Path) -> list[str]:
        suffix = self.settings.definition_suffix
        names: set[str] = set()
        for child in directory.iterdir():
            if child.name.startswith(".") or child.name == self.settings.index_file_name:
                continue
            if child.is_dir():
                name = child.name
            elif child.is_file() and child.name.endswith(suffix):
                name = child.name[: -len(suffix)]
            else:
                continue
            try:
                validate_segment(name)
            except InvalidNamePathError:
                logger.debug("Skipping %s: not a valid name segment", child)
                continue
            names.add(name)
        return sorted(names)

    def _walk(self, root: Root, path: NamePath, directory: Path, recursive: bool) -> Iterator[LoadAction]:
        for name in self._child_names(directory):
            action = self._segment_action(root, path + (name,), directory)
            if action is None:
                continue
            yield action
            if recursive and action.directory is not None:
                yield from self._walk(root, action.prefix, action.directory, recursive)
