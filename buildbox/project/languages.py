"""
Language descriptor table.

Every per-language difference the build engine cares about (container image,
project file layout, executable suffix on Windows hosts) lives in
``LANGUAGES``. Everything else in the engine is language-agnostic.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum

from ..core.exceptions import ConfigurationError


class Language(str, Enum):
    """Supported target languages. The value is the lowercase language tag."""

    RUST = "rust"
    JAVA = "java"
    SCALA = "scala"
    SWIFT = "swift"
    KOTLIN = "kotlin"
    PYTHON = "python"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    PHP = "php"

    @classmethod
    def parse(cls, value: str | Language) -> Language:
        if isinstance(value, Language):
            return value
        normalized = str(value or "").strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            supported = ", ".join(lang.value for lang in cls)
            raise ConfigurationError(
                f"Unsupported language '{value}'. Supported: {supported}"
            ) from None

    @property
    def tag(self) -> str:
        return self.value


class FileRole(str, Enum):
    """Role of a generated file inside a project."""

    MANIFEST = "manifest"
    SOLUTION = "solution"
    TEST = "test"
    EXTRA_CONFIG = "extra_config"


@dataclass(frozen=True, slots=True)
class ProjectFile:
    """A generated file at a fixed path relative to the sandbox root."""

    role: FileRole
    path: str


@dataclass(frozen=True, slots=True)
class LanguageDescriptor:
    """Image, file layout and suffix rule for one language."""

    language: Language
    image: str
    files: tuple[ProjectFile, ...]
    windows_suffix: str = ""

    @property
    def tag(self) -> str:
        return self.language.value

    def files_for(self, role: FileRole) -> tuple[ProjectFile, ...]:
        return tuple(item for item in self.files if item.role is role)

    def ordered_files(self) -> tuple[ProjectFile, ...]:
        """Files in cache-key order: manifest, solution, test, extra config."""
        order = list(FileRole)
        return tuple(sorted(self.files, key=lambda item: order.index(item.role)))

    def executable(self, name: str, platform: str | None = None) -> str:
        """Apply the host executable-suffix rule (``mvn`` -> ``mvn.cmd`` on Windows)."""
        platform = platform or sys.platform
        if platform.startswith("win") and self.windows_suffix:
            if not name.lower().endswith(self.windows_suffix):
                return f"{name}{self.windows_suffix}"
        return name


def _files(*entries: tuple[FileRole, str]) -> tuple[ProjectFile, ...]:
    return tuple(ProjectFile(role=role, path=path) for role, path in entries)


LANGUAGES: dict[Language, LanguageDescriptor] = {
    Language.RUST: LanguageDescriptor(
        language=Language.RUST,
        image="rust:latest",
        files=_files(
            (FileRole.MANIFEST, "Cargo.toml"),
            (FileRole.SOLUTION, "src/lib.rs"),
        ),
    ),
    Language.JAVA: LanguageDescriptor(
        language=Language.JAVA,
        image="maven:3.9-eclipse-temurin-21",
        files=_files(
            (FileRole.MANIFEST, "pom.xml"),
            (FileRole.SOLUTION, "src/main/java/com/example/solution/Solution.java"),
            (FileRole.TEST, "src/test/java/com/example/solution/SolutionTest.java"),
        ),
        windows_suffix=".cmd",
    ),
    Language.SCALA: LanguageDescriptor(
        language=Language.SCALA,
        image="sbtscala/scala-sbt:eclipse-temurin-17.0.4_1.7.1_3.2.0",
        files=_files(
            (FileRole.MANIFEST, "build.sbt"),
            (FileRole.SOLUTION, "src/main/scala/Solution.scala"),
            (FileRole.TEST, "src/test/scala/SolutionTest.scala"),
        ),
        windows_suffix=".cmd",
    ),
    Language.SWIFT: LanguageDescriptor(
        language=Language.SWIFT,
        image="swift:latest",
        files=_files(
            (FileRole.MANIFEST, "Package.swift"),
            (FileRole.SOLUTION, "Sources/Solution/Solution.swift"),
            (FileRole.TEST, "Tests/SolutionTests/SolutionTests.swift"),
        ),
    ),
    Language.KOTLIN: LanguageDescriptor(
        language=Language.KOTLIN,
        image="gradle:jdk21",
        files=_files(
            (FileRole.MANIFEST, "build.gradle"),
            (FileRole.SOLUTION, "src/main/kotlin/Solution.kt"),
            (FileRole.TEST, "src/test/kotlin/SolutionTest.kt"),
        ),
        windows_suffix=".bat",
    ),
    Language.PYTHON: LanguageDescriptor(
        language=Language.PYTHON,
        image="python:3.12",
        files=_files(
            (FileRole.MANIFEST, "requirements.txt"),
            (FileRole.SOLUTION, "solution.py"),
            (FileRole.TEST, "test.py"),
        ),
    ),
    Language.JAVASCRIPT: LanguageDescriptor(
        language=Language.JAVASCRIPT,
        image="node:20",
        files=_files(
            (FileRole.MANIFEST, "package.json"),
            (FileRole.SOLUTION, "src/solution.js"),
            (FileRole.TEST, "src/solution.test.js"),
        ),
        windows_suffix=".cmd",
    ),
    Language.TYPESCRIPT: LanguageDescriptor(
        language=Language.TYPESCRIPT,
        image="node:20",
        files=_files(
            (FileRole.MANIFEST, "package.json"),
            (FileRole.SOLUTION, "src/solution.ts"),
            (FileRole.TEST, "src/solution.test.ts"),
            (FileRole.EXTRA_CONFIG, "tsconfig.json"),
        ),
        windows_suffix=".cmd",
    ),
    Language.PHP: LanguageDescriptor(
        language=Language.PHP,
        image="composer:latest",
        files=_files(
            (FileRole.MANIFEST, "composer.json"),
            (FileRole.SOLUTION, "src/Solution.php"),
            (FileRole.TEST, "tests/SolutionTest.php"),
        ),
        windows_suffix=".cmd",
    ),
}


def get_descriptor(
    language: str | Language,
    image_overrides: dict[str, str] | None = None,
) -> LanguageDescriptor:
    """Look up a descriptor, applying a configured image override if any."""
    lang = Language.parse(language)
    descriptor = LANGUAGES[lang]
    override = (image_overrides or {}).get(lang.value)
    if override and override != descriptor.image:
        return LanguageDescriptor(
            language=descriptor.language,
            image=override,
            files=descriptor.files,
            windows_suffix=descriptor.windows_suffix,
        )
    return descriptor
