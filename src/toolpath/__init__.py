"""
toolpath - Lazy, priority-ordered lookup of command definitions.

toolpath resolves dotted command paths ("db.migrate") against an ordered list
of filesystem roots. Each root is either a single definition file or a
directory hierarchy that mirrors the command namespace. It provides:
- Per-path overlay: a higher-priority root overrides only what it defines
- Lazy loading: only the files on the path to a query are read
- Collections, tools and aliases with flag/argument definitions
- A pluggable interpreter seam (YAML definitions by default)

Example usage:
    $ toolpath --root ./tools which db migrate
    $ toolpath --root ./tools list --recursive
"""

from toolpath.cache import DefinitionCache, LoadState
from toolpath.resolver import Resolution, Resolver
from toolpath.roots import RootRegistry
from toolpath.schema import (
    Alias,
    ArgDefinition,
    ArgKind,
    Collection,
    Entry,
    FlagDefinition,
    NamePath,
    Root,
    RootKind,
    Tool,
    make_name_path,
)
from toolpath.settings import LookupSettings, load_settings
from toolpath.sink import DefinitionInterpreter, RegistrationSink

__version__ = "0.1.0"
__author__ = "toolpath Contributors"

__all__ = [
    "__version__",
    "__author__",
    "Alias",
    "ArgDefinition",
    "ArgKind",
    "Collection",
    "DefinitionCache",
    "DefinitionInterpreter",
    "Entry",
    "FlagDefinition",
    "LoadState",
    "LookupSettings",
    "NamePath",
    "RegistrationSink",
    "Resolution",
    "Resolver",
    "Root",
    "RootKind",
    "RootRegistry",
    "Tool",
    "load_settings",
    "make_name_path",
]
