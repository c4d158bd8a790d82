"""
Build orchestrator.

Drives one lifecycle command ("compile", "test", ...) for one language:
read the generated project, consult the result cache, dispatch on a miss,
record the outcome and derive (success, error message).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import docker

from ..core.config import BuildboxConfig, ConfigManager
from ..core.exceptions import DetachedExecutionError, InfrastructureError
from ..core.logging import get_logger
from ..project.languages import Language, get_descriptor
from ..project.materializer import read_project_sources
from ..sandbox.containers import ContainerLifecycleManager
from ..sandbox.dispatcher import ExecutionDispatcher
from ..sandbox.runtimes.base import ExecutionEnvironment, ExecutionResult
from ..sandbox.runtimes.docker_runtime import DockerSandboxRuntime, connect_engine
from .cache import ResultCache, compute_key, decode_outcome, encode_outcome

logger = get_logger(__name__)


@dataclass(slots=True)
class BuildOutcome:
    """Result of one orchestrated build or test step."""

    success: bool
    message: str
    exit_code: int | None = None
    cached: bool = False

    def as_tuple(self) -> tuple[bool, str]:
        return self.success, self.message


def only_error_message(stderr: str, exit_code: int) -> str:
    """Empty on success, the raw stderr text otherwise."""
    return "" if exit_code == 0 else stderr


class BuildOrchestrator:
    """Generic build driver parameterized by the language descriptor table."""

    def __init__(
        self,
        dispatcher: ExecutionDispatcher,
        *,
        sandbox_dir: Path,
        cache: ResultCache | None = None,
        lifecycle: ContainerLifecycleManager | None = None,
        environment: ExecutionEnvironment | str = ExecutionEnvironment.CONTAINER,
        verbose: bool = False,
    ):
        self.dispatcher = dispatcher
        self.sandbox_dir = Path(sandbox_dir)
        self.cache = cache
        self.lifecycle = lifecycle
        self.environment = ExecutionEnvironment.parse(environment)
        self.verbose = verbose

    @classmethod
    def from_config(
        cls,
        config_manager: ConfigManager,
        *,
        client: docker.DockerClient | None = None,
    ) -> BuildOrchestrator:
        """Wire cache, dispatcher and container management from configuration."""
        config: BuildboxConfig = config_manager.config
        sandbox_dir = config_manager.sandbox_dir
        environment = ExecutionEnvironment.parse(config.sandbox.environment)
        cache = ResultCache(config_manager.cache_path) if config.cache.enabled else None

        container_runtime = None
        lifecycle = None
        if environment is ExecutionEnvironment.CONTAINER:
            client = client or connect_engine(config.docker.base_url)
            container_runtime = DockerSandboxRuntime(client)
            if config.sandbox.ensure_ready:
                lifecycle = ContainerLifecycleManager(
                    client,
                    sandbox_dir=sandbox_dir,
                    config=config.docker,
                    verbose=config.verbose,
                )

        dispatcher = ExecutionDispatcher(
            sandbox_dir=sandbox_dir,
            container_runtime=container_runtime,
            docker_config=config.docker,
        )
        return cls(
            dispatcher,
            sandbox_dir=sandbox_dir,
            cache=cache,
            lifecycle=lifecycle,
            environment=environment,
            verbose=config.verbose,
        )

    def build(self, language: Language | str, command: str) -> BuildOutcome:
        """
        Run ``command`` against the current sandbox project of ``language``.

        Raises:
            ProjectFileMissingError: a generated file is absent
            ContainerNotFoundError: the language container does not exist

        Returns:
            BuildOutcome. Infrastructure failures come back as an unsuccessful
            outcome carrying the error text and are not cached.
        """
        lang = Language.parse(language)
        logger.info("Launch: %s", command)
        if not command.strip():
            return BuildOutcome(success=True, message="", exit_code=0)

        sources = read_project_sources(get_descriptor(lang), self.sandbox_dir)
        key = compute_key(command, sources)

        cached_value = self.cache.get(key) if self.cache is not None else None
        if cached_value is not None:
            exit_code, stderr = decode_outcome(cached_value)
            logger.info("Build result already cached")
            cached = True
        else:
            try:
                result = self._dispatch(lang, command)
            except InfrastructureError as exc:
                logger.warning("Dispatch of '%s' for %s failed: %s", command, lang.tag, exc)
                return BuildOutcome(success=False, message=str(exc))
            exit_code = result.exit_code
            stderr = result.stderr_text
            if self.cache is not None:
                self.cache.set(key, encode_outcome(exit_code, stderr))
            cached = False

        success = exit_code == 0
        logger.info("Exit result: %s", success)
        if self.verbose:
            logger.info("Output: %s", stderr)
        return BuildOutcome(
            success=success,
            message=only_error_message(stderr, exit_code),
            exit_code=exit_code,
            cached=cached,
        )

    def _dispatch(self, lang: Language, command: str) -> ExecutionResult:
        if self.environment is ExecutionEnvironment.CONTAINER and self.lifecycle is not None:
            self.lifecycle.ensure_ready(lang)
        result = self.dispatcher.run(self.environment, lang, command)
        if result.exit_code is None:
            raise DetachedExecutionError(command)
        return result
