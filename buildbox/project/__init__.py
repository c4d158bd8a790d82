"""
Language layouts and project files.
"""

from .languages import (
    LANGUAGES,
    FileRole,
    Language,
    LanguageDescriptor,
    ProjectFile,
    get_descriptor,
)
from .materializer import Project, read_project_sources, write_project

__all__ = [
    "FileRole",
    "LANGUAGES",
    "Language",
    "LanguageDescriptor",
    "Project",
    "ProjectFile",
    "get_descriptor",
    "read_project_sources",
    "write_project",
]
