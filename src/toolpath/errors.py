"""
Exception hierarchy for toolpath.

All toolpath exceptions inherit from ToolpathError, allowing callers to catch
every lookup failure with a single except clause.

Exception Categories:
    - InvalidNamePathError: A name path segment is not addressable
    - DefinitionError: A definition file could not be turned into entries
    - ResolutionError: A lookup could not be completed
    - SettingsError: The settings file is missing or invalid

Note that a missing root directory or file is never an error: absent roots
are treated as empty so that lookups fall through to lower-priority roots.
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Name path errors: 1xxx
ERROR_NAME_PATH_INVALID = 1001

# Definition errors: 2xxx
ERROR_DEFINITION_DUPLICATE = 2001
ERROR_DEFINITION_LOAD_FAILED = 2002
ERROR_DEFINITION_LOAD_CYCLE = 2003

# Resolution errors: 3xxx
ERROR_RESOLUTION_ALIAS_CYCLE = 3001

# Settings errors: 4xxx
ERROR_SETTINGS_NOT_FOUND = 4001
ERROR_SETTINGS_INVALID = 4002


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class ToolpathError(Exception):
    """
    Base exception for all toolpath errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Name Path Errors
# =============================================================================


@dataclass
class InvalidNamePathError(ToolpathError):
    """Raised when a name path contains a segment that cannot be addressed."""

    segment: str = ""
    reason: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid name path segment {self.segment!r}: {self.reason}"
        if self.code == 0:
            self.code = ERROR_NAME_PATH_INVALID
        self.context.update({
            "segment": self.segment,
            "reason": self.reason,
        })


# =============================================================================
# Definition Errors
# =============================================================================


@dataclass
class DefinitionError(ToolpathError):
    """
    Base class for errors raised while loading definition files.

    Any definition error aborts the load that raised it. None of the
    entries staged by that load are committed to the cache.

    Attributes:
        root_path: Filesystem path of the root being loaded
        source_path: Definition file being evaluated (if known)
    """

    root_path: str = ""
    source_path: str | None = None

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context.update({
            "root_path": self.root_path,
            "source_path": self.source_path,
        })


@dataclass
class DuplicateDefinitionError(DefinitionError):
    """Raised when two definitions claim the same path within one root."""

    name: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Duplicate definition of '{self.name}' in {self.root_path}"
        if self.code == 0:
            self.code = ERROR_DEFINITION_DUPLICATE
        if not self.suggestion:
            self.suggestion = "Define each tool once per root, either inline or in its own file"
        super().__post_init__()
        self.context["name"] = self.name


@dataclass
class DefinitionLoadError(DefinitionError):
    """Raised when a definition file is present but cannot be evaluated."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to load {self.source_path}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_DEFINITION_LOAD_FAILED
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


@dataclass
class LoadCycleError(DefinitionError):
    """Raised when a prefix is requested again while it is still loading."""

    name: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Reentrant load of '{self.name}' in {self.root_path}"
        if self.code == 0:
            self.code = ERROR_DEFINITION_LOAD_CYCLE
        super().__post_init__()
        self.context["name"] = self.name


# =============================================================================
# Resolution Errors
# =============================================================================


@dataclass
class ResolutionError(ToolpathError):
    """
    Base class for errors raised while resolving a name path.

    Attributes:
        name: The dotted name path being resolved
    """

    name: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context["name"] = self.name


@dataclass
class AliasCycleError(ResolutionError):
    """Raised when following aliases revisits a path."""

    chain: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Alias cycle while resolving '{self.name}': {' -> '.join(self.chain)}"
        if self.code == 0:
            self.code = ERROR_RESOLUTION_ALIAS_CYCLE
        if not self.suggestion:
            self.suggestion = "Point one of the aliases at a tool or collection"
        super().__post_init__()
        self.context["chain"] = self.chain


# =============================================================================
# Settings Errors
# =============================================================================


@dataclass
class SettingsError(ToolpathError):
    """Raised when a settings file cannot be read or validated."""

    settings_path: str = ""
    validation_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid settings in {self.settings_path}: {self.validation_error}"
        if self.code == 0:
            self.code = ERROR_SETTINGS_INVALID
        self.context.update({
            "settings_path": self.settings_path,
            "validation_error": self.validation_error,
        })


@dataclass
class SettingsNotFoundError(SettingsError):
    """Raised when the settings file does not exist."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Settings file not found: {self.settings_path}"
        if self.code == 0:
            self.code = ERROR_SETTINGS_NOT_FOUND
        super().__post_init__()
