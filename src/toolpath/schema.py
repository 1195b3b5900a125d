"""
Core data types for toolpath.

This module defines the runtime representation of everything the resolver
hands out:
- NamePath: a validated tuple of namespace segments
- Root/RootKind: one registered filesystem source of definitions
- Tool/Collection/Alias: the three entry variants
- FlagDefinition/ArgDefinition: the invocation surface of a tool

Design Decisions:
    - Entries are frozen dataclasses, immutable once registered
    - Descriptions are kept as line tuples; short_desc/long_desc join them
    - Name paths are plain tuples so they hash and compare structurally
    - Definition files are validated separately (see toolpath.definition)
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Union

from toolpath.errors import InvalidNamePathError

NamePath = tuple[str, ...]

ROOT_NAME: NamePath = ()

_FORBIDDEN_CHARS = frozenset("./\\\0")


# =============================================================================
# Name Paths
# =============================================================================


def validate_segment(segment: str) -> str:
    """
    Check that a single segment can address a namespace level.

    Segments double as directory and file names, so anything that could
    escape the root directory is rejected.

    Raises:
        InvalidNamePathError: If the segment is empty or contains a
            dot, a path separator or a NUL byte
    """
    if not isinstance(segment, str):
        raise InvalidNamePathError(segment=repr(segment), reason="segment must be a string")
    if not segment or not segment.strip():
        raise InvalidNamePathError(segment=segment, reason="segment must not be empty")
    bad = _FORBIDDEN_CHARS.intersection(segment)
    if bad:
        raise InvalidNamePathError(
            segment=segment,
            reason=f"segment must not contain {''.join(sorted(bad))!r}",
        )
    return segment


def make_name_path(value: Union[str, Iterable[str]]) -> NamePath:
    """
    Build a NamePath from dotted text or a sequence of segments.

    Example:
        >>> make_name_path("collection-1.tool-1-3")
        ('collection-1', 'tool-1-3')
        >>> make_name_path(["collection-1", "tool-1-3"])
        ('collection-1', 'tool-1-3')
        >>> make_name_path("")
        ()
    """
    if isinstance(value, str):
        segments: Iterable[str] = value.split(".") if value else ()
    else:
        segments = value
    return tuple(validate_segment(s) for s in segments)


def format_name_path(path: NamePath) -> str:
    """Render a NamePath in its dotted form (empty string for the root)."""
    return ".".join(path)


def is_prefix(prefix: NamePath, path: NamePath) -> bool:
    """Return True if prefix is an ancestor of (or equal to) path."""
    return len(prefix) <= len(path) and path[: len(prefix)] == prefix


# =============================================================================
# Roots
# =============================================================================


class RootKind(str, Enum):
    """How a root organizes its definitions on disk."""

    SINGLE_FILE = "single_file"
    INDEXED_HIERARCHY = "indexed_hierarchy"


@dataclass(frozen=True)
class Root:
    """
    One registered filesystem source of definitions.

    Priority is not stored here; it is the root's position in the
    RootRegistry.

    Attributes:
        path: Directory (hierarchy) or file/directory (single file)
        kind: How definitions under path are organized
    """

    path: Path
    kind: RootKind

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.path}"


# =============================================================================
# Invocation Surface
# =============================================================================


class ArgKind(str, Enum):
    """Arity of a positional argument."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    REMAINING = "remaining"


@dataclass(frozen=True)
class FlagDefinition:
    """A flag accepted by a tool, e.g. ``-y/--yes``."""

    key: str
    switches: tuple[str, ...] = ()
    accept: str | None = None
    default: Any = None
    desc: tuple[str, ...] = ()


@dataclass(frozen=True)
class ArgDefinition:
    """A positional argument accepted by a tool."""

    key: str
    kind: ArgKind = ArgKind.REQUIRED
    default: Any = None
    desc: tuple[str, ...] = ()


# =============================================================================
# Entries
# =============================================================================


def _join_lines(lines: tuple[str, ...]) -> str | None:
    if not lines:
        return None
    return "\n".join(lines)


@dataclass(frozen=True)
class Entry:
    """
    Fields shared by every entry variant.

    Attributes:
        full_name: NamePath the entry is registered under
        desc: Short description lines
        long_desc: Long description lines
        source_path: Definition file (or directory) that produced the entry
        root: Root the entry was loaded from (None for the synthetic root)
    """

    full_name: NamePath
    desc: tuple[str, ...] = ()
    long_desc: tuple[str, ...] = ()
    source_path: Path | None = None
    root: Root | None = None

    kind = "entry"

    @property
    def short_desc(self) -> str | None:
        """Short description as text, or None if there is none."""
        return _join_lines(self.desc)

    @property
    def long_desc_text(self) -> str | None:
        """Long description as text, or None if there is none."""
        return _join_lines(self.long_desc)

    @property
    def simple_name(self) -> str | None:
        """Last segment of the full name (None for the root)."""
        return self.full_name[-1] if self.full_name else None

    @property
    def display_name(self) -> str:
        """Full name as the words a user would type."""
        return " ".join(self.full_name)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "kind": self.kind,
            "full_name": list(self.full_name),
            "desc": list(self.desc),
            "long_desc": list(self.long_desc),
            "source_path": str(self.source_path) if self.source_path else None,
            "root": str(self.root) if self.root else None,
        }


@dataclass(frozen=True)
class Tool(Entry):
    """An invocable entry with flags and positional arguments."""

    flags: tuple[FlagDefinition, ...] = ()
    args: tuple[ArgDefinition, ...] = ()
    run: str | None = None

    kind = "tool"

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update({
            "flags": [
                {
                    "key": f.key,
                    "switches": list(f.switches),
                    "accept": f.accept,
                    "default": f.default,
                    "desc": list(f.desc),
                }
                for f in self.flags
            ],
            "args": [
                {"key": a.key, "kind": a.kind.value, "default": a.default, "desc": list(a.desc)}
                for a in self.args
            ],
            "run": self.run,
        })
        return data


@dataclass(frozen=True)
class Collection(Entry):
    """
    A non-invocable namespace node.

    Collections exist for every prefix even when nothing declares them;
    implicit is True when the entry was materialized from a bare directory
    or synthesized for the root.
    """

    implicit: bool = False

    kind = "collection"

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["implicit"] = self.implicit
        return data


@dataclass(frozen=True)
class Alias(Entry):
    """An entry that redirects resolution to another name path."""

    target: NamePath = field(default=())

    kind = "alias"

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["target"] = list(self.target)
        return data


def root_collection() -> Collection:
    """The synthetic empty collection returned when nothing matches."""
    return Collection(full_name=ROOT_NAME, implicit=True)
