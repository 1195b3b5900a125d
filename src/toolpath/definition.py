"""
YAML definition files for toolpath.

This module provides the default DefinitionInterpreter. A definition file is
a YAML mapping describing one node of the namespace and, recursively, the
nodes below it:

    desc: Database helpers
    tools:
      migrate:
        desc: Apply pending migrations
        run: alembic upgrade head
        flags:
          - key: dry_run
            switches: ["-n", "--dry-run"]
            desc: Print the SQL instead of running it
        args:
          - key: revision
            kind: optional
    aliases:
      up: db.migrate

Design Decisions:
    - All models use strict validation (extra="forbid")
    - Nodes with run, flags or args, or without children, are tools
    - The top level of an index file is registered only if it has a description
    - Alias targets are absolute dotted paths
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from toolpath.errors import DefinitionLoadError, InvalidNamePathError
from toolpath.schema import ArgDefinition, ArgKind, FlagDefinition, NamePath, validate_segment
from toolpath.sink import RegistrationSink, as_lines

logger = logging.getLogger(__name__)

Description = Union[str, list[str], None]


# =============================================================================
# File Schema
# =============================================================================


class FlagNode(BaseModel):
    """A flag declared in a definition file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str = Field(..., min_length=1)
    switches: list[str] = Field(default_factory=list)
    accept: str | None = None
    default: Any = None
    desc: Description = None

    @field_validator("switches")
    @classmethod
    def validate_switches(cls, v: list[str]) -> list[str]:
        """Switches must look like -x or --long-name."""
        for switch in v:
            if not switch.startswith("-") or switch.strip("-") == "":
                msg = f"Invalid flag switch: {switch!r}"
                raise ValueError(msg)
        return v

    def to_definition(self) -> FlagDefinition:
        switches = tuple(self.switches) or (f"--{self.key.replace('_', '-')}",)
        return FlagDefinition(
            key=self.key,
            switches=switches,
            accept=self.accept,
            default=self.default,
            desc=as_lines(self.desc),
        )


class ArgNode(BaseModel):
    """A positional argument declared in a definition file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str = Field(..., min_length=1)
    kind: ArgKind = ArgKind.REQUIRED
    default: Any = None
    desc: Description = None

    def to_definition(self) -> ArgDefinition:
        return ArgDefinition(key=self.key, kind=self.kind, default=self.default, desc=as_lines(self.desc))


class AliasNode(BaseModel):
    """Long form of an alias declaration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    target: Union[str, list[str]]
    desc: Description = None


class DefinitionNode(BaseModel):
    """
    One node of a definition file.

    Attributes:
        desc: Short description (string or list of lines)
        long_desc: Long description (string or list of lines)
        kind: Force the node to be a tool or a collection
        run: Opaque invocation handle for the execution engine
        flags: Flags accepted by a tool
        args: Positional arguments accepted by a tool
        tools: Child nodes keyed by segment name
        aliases: Alias declarations keyed by segment name
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    desc: Description = None
    long_desc: Description = None
    kind: Literal["tool", "collection"] | None = None
    run: str | None = None
    flags: list[FlagNode] = Field(default_factory=list)
    args: list[ArgNode] = Field(default_factory=list)
    tools: dict[str, DefinitionNode] = Field(default_factory=dict)
    aliases: dict[str, Union[str, list[str], AliasNode]] = Field(default_factory=dict)

    @field_validator("tools", "aliases")
    @classmethod
    def validate_names(cls, v: dict[str, Any]) -> dict[str, Any]:
        """Child names must be usable as name path segments."""
        for name in v:
            try:
                validate_segment(name)
            except InvalidNamePathError as e:
                raise ValueError(e.message) from e
        return v

    @model_validator(mode="after")
    def validate_shape(self) -> DefinitionNode:
        """Reject collections with invocation details and names used twice."""
        if self.kind == "collection" and self.is_invocable:
            msg = "A collection cannot declare run, flags or args"
            raise ValueError(msg)
        clash = set(self.tools) & set(self.aliases)
        if clash:
            msg = f"Names declared as both tool and alias: {', '.join(sorted(clash))}"
            raise ValueError(msg)
        return self

    @property
    def is_invocable(self) -> bool:
        return self.run is not None or bool(self.flags) or bool(self.args)

    @property
    def has_description(self) -> bool:
        return bool(self.desc) or bool(self.long_desc)

    def resolved_kind(self, top_of_index: bool = False) -> str:
        """Return "tool" or "collection" for this node."""
        if self.kind is not None:
            return self.kind
        if self.is_invocable:
            return "tool"
        if top_of_index or self.tools:
            return "collection"
        return "tool"


# =============================================================================
# Interpreter
# =============================================================================


class YamlDefinitionInterpreter:
    """
    Evaluates YAML definition files into sink registrations.

    Example:
        >>> interpreter = YamlDefinitionInterpreter()
        >>> node = interpreter.parse(Path("tools/.tools.yaml"))
    """

    def parse(self, source: Path) -> DefinitionNode:
        """
        Read and validate one definition file.

        Raises:
            DefinitionLoadError: If the file is unreadable, is not valid YAML
                or does not match the definition schema
        """
        try:
            with source.open() as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise self._load_error(source, f"Invalid YAML: {e}") from e
        except OSError as e:
            raise self._load_error(source, str(e)) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise self._load_error(source, "Definition file must contain a mapping")

        try:
            return DefinitionNode.model_validate(data)
        except ValidationError as e:
            raise self._load_error(source, str(e)) from e

    def evaluate(self, source: Path, sink: RegistrationSink) -> None:
        """Evaluate source and register everything it defines."""
        node = self.parse(source)
        self._register(node, (), sink, top_of_index=sink.index)

    def _register(self, node: DefinitionNode, path: NamePath, sink: RegistrationSink, top_of_index: bool = False) -> None:
        if node.resolved_kind(top_of_index) == "tool":
            sink.register_tool(
                path,
                desc=node.desc,
                long_desc=node.long_desc,
                flags=[f.to_definition() for f in node.flags],
                args=[a.to_definition() for a in node.args],
                run=node.run,
            )
        elif node.has_description or not top_of_index:
            sink.register_collection(path, desc=node.desc, long_desc=node.long_desc)

        for name, child in node.tools.items():
            self._register(child, path + (name,), sink)

        for name, alias in node.aliases.items():
            if isinstance(alias, AliasNode):
                sink.register_alias(path + (name,), alias.target, desc=alias.desc)
            else:
                sink.register_alias(path + (name,), alias)

    @staticmethod
    def _load_error(source: Path, reason: str) -> DefinitionLoadError:
        return DefinitionLoadError(
            root_path=str(source.parent),
            source_path=str(source),
            underlying_error=reason,
        )
