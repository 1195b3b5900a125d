"""
Settings for toolpath.

LookupSettings captures the filesystem conventions the translator relies on
and, optionally, a list of roots to register up front. Settings can be
built in code or loaded from a YAML file:

    index_file_name: .tools.yaml
    definition_suffix: .yaml
    roots:
      - path: ./tools
        kind: indexed_hierarchy
      - path: ~/.tools.yaml
        kind: single_file

Roots are listed highest priority first. Relative root paths are resolved
against the directory of the settings file.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from toolpath.errors import SettingsError, SettingsNotFoundError
from toolpath.schema import RootKind

DEFAULT_INDEX_FILE_NAME = ".tools.yaml"
DEFAULT_CONFIG_FILE_NAME = ".tools.yaml"
DEFAULT_DEFINITION_SUFFIX = ".yaml"


class RootSpec(BaseModel):
    """A root declared in a settings file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: Path = Field(
        ...,
        description="Directory or file backing the root",
    )
    kind: RootKind = Field(
        default=RootKind.INDEXED_HIERARCHY,
        description="indexed_hierarchy or single_file",
    )


class LookupSettings(BaseModel):
    """
    Filesystem conventions and initial roots.

    Attributes:
        index_file_name: File in each hierarchy directory declaring that level
        config_file_name: File a single-file root directory is expected to hold
        definition_suffix: Suffix of per-segment definition files
        roots: Roots to register, highest priority first
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    index_file_name: str = Field(
        default=DEFAULT_INDEX_FILE_NAME,
        min_length=1,
        description="Index definition file name in hierarchy directories",
    )
    config_file_name: str = Field(
        default=DEFAULT_CONFIG_FILE_NAME,
        min_length=1,
        description="Definition file name looked up inside single-file root directories",
    )
    definition_suffix: str = Field(
        default=DEFAULT_DEFINITION_SUFFIX,
        description="Suffix of per-segment definition files",
    )
    roots: list[RootSpec] = Field(
        default_factory=list,
        description="Roots in priority order, highest first",
    )

    @field_validator("index_file_name", "config_file_name")
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        """File names must not contain path separators."""
        if "/" in v or "\\" in v:
            msg = f"File name must not contain path separators: {v}"
            raise ValueError(msg)
        return v

    @field_validator("definition_suffix")
    @classmethod
    def validate_suffix(cls, v: str) -> str:
        """Suffix must look like a file extension."""
        if not v.startswith(".") or len(v) < 2 or "/" in v:
            msg = f"Invalid definition suffix: {v}. Expected something like '.yaml'"
            raise ValueError(msg)
        return v


def load_settings(path: Path | str) -> LookupSettings:
    """
    Load and validate a settings YAML file.

    Args:
        path: Path to the settings file

    Returns:
        Validated LookupSettings with root paths made absolute

    Raises:
        SettingsNotFoundError: If the file doesn't exist
        SettingsError: If the file is malformed or invalid
    """
    path = Path(path)
    if not path.is_file():
        raise SettingsNotFoundError(settings_path=str(path))

    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SettingsError(settings_path=str(path), validation_error=f"Invalid YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SettingsError(settings_path=str(path), validation_error="Settings must be a mapping")

    try:
        settings = LookupSettings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(settings_path=str(path), validation_error=str(e)) from e

    base = path.parent.resolve()
    roots = [
        RootSpec(path=(base / spec.path.expanduser()).resolve(), kind=spec.kind)
        for spec in settings.roots
    ]
    return settings.model_copy(update={"roots": roots})
