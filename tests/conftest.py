"""
Pytest configuration and fixtures for toolpath tests.

This module provides shared fixtures used across unit, integration,
and security tests. The two definition trees mirror the layouts the
resolver has to support:

index_file_only:
    .tools.yaml                  tool-1, tool-2, collection-1.{tool-1-1,tool-1-2}

normal_file_hierarchy:
    tool-1.yaml
    tool-3.yaml
    collection-1/
        tool-1-1.yaml
        tool-1-3.yaml
"""

import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

from toolpath.cache import DefinitionCache
from toolpath.resolver import Resolver
from toolpath.roots import RootRegistry


def write_tree(base: Path, files: dict[str, str]) -> Path:
    """Write {relative path: content} under base and return base."""
    for rel, content in files.items():
        target = base / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
    return base


INDEX_FILE_ONLY = {
    ".tools.yaml": """
tools:
  tool-1:
    desc: tool-1 short description
    long_desc: tool-1 long description
  tool-2:
    desc: tool-2 short description
  collection-1:
    desc: collection-1 short description
    tools:
      tool-1-1:
        desc: tool-1-1 short description
        long_desc: tool-1-1 long description
      tool-1-2:
        desc: tool-1-2 short description
        long_desc: tool-1-2 long description
""",
}

NORMAL_FILE_HIERARCHY = {
    "tool-1.yaml": """
desc: normal tool-1 short description
long_desc: normal tool-1 long description
""",
    "tool-3.yaml": """
desc: normal tool-3 short description
long_desc: normal tool-3 long description
""",
    "collection-1/tool-1-1.yaml": """
desc: normal tool-1-1 short description
long_desc: normal tool-1-1 long description
""",
    "collection-1/tool-1-3.yaml": """
desc: normal tool-1-3 short description
long_desc: normal tool-1-3 long description
""",
}


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_tree(temp_dir: Path) -> Callable[[str, dict[str, str]], Path]:
    """Return a helper that writes a named definition tree under temp_dir."""

    def _make(name: str, files: dict[str, str]) -> Path:
        base = temp_dir / name
        base.mkdir(parents=True, exist_ok=True)
        return write_tree(base, files)

    return _make


@pytest.fixture
def index_file_only(temp_dir: Path) -> Path:
    """A directory whose only content is one index file."""
    return write_tree(temp_dir / "index-file-only", INDEX_FILE_ONLY)


@pytest.fixture
def normal_file_hierarchy(temp_dir: Path) -> Path:
    """A directory hierarchy with one definition file per tool."""
    return write_tree(temp_dir / "normal-file-hierarchy", NORMAL_FILE_HIERARCHY)


@pytest.fixture
def resolver() -> Resolver:
    """A resolver with no roots and default settings."""
    return Resolver(registry=RootRegistry(), cache=DefinitionCache())
