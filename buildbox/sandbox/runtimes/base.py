"""
Base types for sandbox execution runtimes.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Protocol


class ExecutionEnvironment(str, Enum):
    """Where a dispatched command runs."""

    HOST = "host"
    CONTAINER = "container"

    @classmethod
    def parse(cls, value: "str | ExecutionEnvironment") -> "ExecutionEnvironment":
        if isinstance(value, ExecutionEnvironment):
            return value
        return cls(str(value).strip().lower())


@dataclass(slots=True)
class ExecutionRequest:
    """Execution request passed to a runtime backend."""

    argv: list[str]
    workdir: str | Path
    environment: ExecutionEnvironment
    user: str | None = None  # numeric "uid:gid"
    container: str | None = None  # target container name for the container path
    detach: bool = False


@dataclass(slots=True)
class ExecutionResult:
    """Raw process outcome. ``exit_code`` is None when no status was observable."""

    exit_code: int | None
    stdout: bytes = b""
    stderr: bytes = b""
    argv: list[str] = field(default_factory=list)

    @property
    def detached(self) -> bool:
        return self.exit_code is None

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")


class SandboxRuntime(Protocol):
    """Runtime contract for sandbox execution backends."""

    name: str

    def execute(self, request: ExecutionRequest) -> ExecutionResult:
        """Execute request and return process result."""
