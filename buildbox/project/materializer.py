"""
Project materialization.

Writes generated texts to the fixed paths of a language layout and reads them
back verbatim for cache keys.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path

from ..core.exceptions import ProjectFileMissingError
from ..core.logging import get_logger
from .languages import FileRole, LanguageDescriptor

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Project:
    """Immutable bundle of generated project texts."""

    manifest: str
    solution: str
    test: str = ""
    extra_configs: tuple[str, ...] = ()

    def text_for(self, role: FileRole, index: int = 0) -> str:
        if role is FileRole.MANIFEST:
            return self.manifest
        if role is FileRole.SOLUTION:
            return self.solution
        if role is FileRole.TEST:
            return self.test
        try:
            return self.extra_configs[index]
        except IndexError:
            raise ValueError(f"Project has no extra config #{index + 1}") from None


def write_project(descriptor: LanguageDescriptor, project: Project, sandbox_dir: Path) -> list[Path]:
    """
    Empty ``sandbox_dir`` and write every project file of the language.

    The directory itself is kept: it is the bind-mount source of the language
    container, and a recreated directory would not be visible inside it.

    Args:
        descriptor: Language layout to follow
        project: Generated texts
        sandbox_dir: Host sandbox root

    Returns:
        Paths written, in layout order
    """
    sandbox_dir.mkdir(parents=True, exist_ok=True)
    for entry in sandbox_dir.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()

    written: list[Path] = []
    extra_index = 0
    for project_file in descriptor.files:
        if project_file.role is FileRole.EXTRA_CONFIG:
            text = project.text_for(project_file.role, extra_index)
            extra_index += 1
        else:
            text = project.text_for(project_file.role)

        target = sandbox_dir / project_file.path
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        written.append(target)

    logger.debug("Materialized %s project into %s", descriptor.tag, sandbox_dir)
    return written


def read_project_sources(descriptor: LanguageDescriptor, sandbox_dir: Path) -> list[str]:
    """
    Read the language's project files in cache-key order.

    Raises:
        ProjectFileMissingError: when any expected file is absent.
    """
    sources: list[str] = []
    for project_file in descriptor.ordered_files():
        path = sandbox_dir / project_file.path
        try:
            with open(path, encoding="utf-8", errors="surrogateescape", newline="") as f:
                sources.append(f.read())
        except FileNotFoundError:
            raise ProjectFileMissingError(str(path)) from None
    return sources
