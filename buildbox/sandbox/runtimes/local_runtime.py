"""
Host subprocess runtime.
"""

import subprocess

from ...core.exceptions import CommandNotFoundError
from .base import ExecutionRequest, ExecutionResult


class LocalSandboxRuntime:
    """Executes commands as local processes in the sandbox directory."""

    name = "host"

    def execute(self, request: ExecutionRequest) -> ExecutionResult:
        try:
            result = subprocess.run(
                request.argv,
                capture_output=True,
                cwd=str(request.workdir),
                check=False,
            )
        except FileNotFoundError as exc:
            raise CommandNotFoundError(request.argv[0]) from exc

        return ExecutionResult(
            exit_code=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            argv=list(request.argv),
        )
