"""
Execution dispatcher.

Routes one command line to the host or to the language container. Command
lines are split on whitespace only; quoting, pipes and redirection are not
interpreted.
"""

from __future__ import annotations

from pathlib import Path

from ..core.config import DockerConfig
from ..core.exceptions import ExecutionError
from ..core.logging import get_logger
from ..project.languages import Language, get_descriptor
from .containers import container_name, current_user
from .runtimes.base import ExecutionEnvironment, ExecutionRequest, ExecutionResult, SandboxRuntime
from .runtimes.local_runtime import LocalSandboxRuntime

logger = get_logger(__name__)


def split_command(command_line: str) -> list[str]:
    """Whitespace split. ``"npm run  test"`` -> ``["npm", "run", "test"]``."""
    return command_line.split()


class ExecutionDispatcher:
    """Single entry point for running a command in a given environment."""

    def __init__(
        self,
        *,
        sandbox_dir: Path,
        container_runtime: SandboxRuntime | None = None,
        host_runtime: SandboxRuntime | None = None,
        docker_config: DockerConfig | None = None,
        user: str | None = None,
        platform: str | None = None,
    ):
        self.sandbox_dir = Path(sandbox_dir)
        self.container_runtime = container_runtime
        self.host_runtime = host_runtime or LocalSandboxRuntime()
        self.docker_config = docker_config or DockerConfig()
        self.user = user if user is not None else current_user()
        self.platform = platform

    def build_request(
        self,
        environment: ExecutionEnvironment | str,
        language: Language | str,
        command_line: str,
    ) -> ExecutionRequest:
        environment = ExecutionEnvironment.parse(environment)
        argv = split_command(command_line)
        if not argv:
            raise ExecutionError("Cannot dispatch an empty command")

        if environment is ExecutionEnvironment.HOST:
            descriptor = get_descriptor(language)
            argv[0] = descriptor.executable(argv[0], self.platform)
            return ExecutionRequest(
                argv=argv,
                workdir=self.sandbox_dir,
                environment=environment,
            )

        return ExecutionRequest(
            argv=argv,
            workdir=self.docker_config.container_workdir,
            environment=environment,
            user=self.user,
            container=container_name(language, self.docker_config.container_prefix),
        )

    def run(
        self,
        environment: ExecutionEnvironment | str,
        language: Language | str,
        command_line: str,
    ) -> ExecutionResult:
        """
        Run ``command_line`` for ``language``.

        The container path assumes the language container exists and is
        running; use ContainerLifecycleManager.ensure_ready() beforehand.
        """
        request = self.build_request(environment, language, command_line)
        if request.environment is ExecutionEnvironment.HOST:
            runtime = self.host_runtime
        else:
            if self.container_runtime is None:
                raise ExecutionError("No container runtime configured for container execution")
            runtime = self.container_runtime

        logger.debug("Dispatching %s via %s: %s", Language.parse(language).tag, runtime.name,
                     request.argv)
        return runtime.execute(request)
