"""
Docker runtime for sandbox execution.

Commands run as one-shot execs inside the long-lived language container. The
engine streams multiplexed stdout/stderr frames; each call drains its own
stream to completion before returning, so callers only ever see a complete
result.
"""

from __future__ import annotations

import docker
from docker.errors import DockerException, NotFound
from requests.exceptions import RequestException

from ...core.exceptions import (
    ContainerNotFoundError,
    EngineUnavailableError,
    ExecCreationError,
    ExecutionError,
    StreamAttachError,
)
from ...core.logging import get_logger
from .base import ExecutionRequest, ExecutionResult

logger = get_logger(__name__)

DEFAULT_ENGINE_TIMEOUT = 120


def connect_engine(
    base_url: str | None = None, timeout: int = DEFAULT_ENGINE_TIMEOUT
) -> docker.DockerClient:
    """Connect to the Docker engine (``base_url`` or DOCKER_HOST / local socket)."""
    try:
        if base_url:
            return docker.DockerClient(base_url=base_url, timeout=timeout)
        return docker.from_env(timeout=timeout)
    except DockerException as exc:
        raise EngineUnavailableError(str(exc)) from exc


def check_health(client: docker.DockerClient) -> tuple[bool, str]:
    """Return (healthy, detail) for docker engine availability."""
    try:
        client.ping()
        version = client.version().get("Version") or "unknown"
    except (DockerException, RequestException) as exc:
        detail = str(exc).strip() or "docker daemon unavailable"
        return False, detail
    return True, f"docker daemon ready (server {version})"


class DockerSandboxRuntime:
    """Executes commands inside a running Docker container."""

    name = "docker"

    def __init__(self, client: docker.DockerClient):
        self.client = client

    def execute(self, request: ExecutionRequest) -> ExecutionResult:
        if not request.container:
            raise ExecutionError("Container execution requested without a target container")

        api = self.client.api
        container = request.container
        try:
            exec_info = api.exec_create(
                container,
                request.argv,
                stdout=True,
                stderr=True,
                tty=False,
                user=request.user or "",
                workdir=str(request.workdir),
            )
        except NotFound as exc:
            raise ContainerNotFoundError(container) from exc
        except DockerException as exc:
            raise ExecCreationError(container, str(exc)) from exc
        except RequestException as exc:
            raise EngineUnavailableError(str(exc)) from exc

        exec_id = exec_info["Id"]
        logger.debug("Exec %s created in %s: %s", exec_id[:12], container, request.argv)

        if request.detach:
            try:
                api.exec_start(exec_id, detach=True)
            except (DockerException, RequestException) as exc:
                raise StreamAttachError(str(exc)) from exc
            return ExecutionResult(exit_code=None, argv=list(request.argv))

        stdout, stderr = self._drain(api, exec_id)

        try:
            inspection = api.exec_inspect(exec_id)
        except (DockerException, RequestException) as exc:
            raise StreamAttachError(f"could not read exit status: {exc}") from exc

        exit_code = inspection.get("ExitCode")
        logger.debug("Exec %s finished with exit code %s", exec_id[:12], exit_code)
        return ExecutionResult(
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            argv=list(request.argv),
        )

    @staticmethod
    def _drain(api, exec_id: str) -> tuple[bytes, bytes]:
        try:
            stream = api.exec_start(exec_id, stream=True, demux=True)
        except (DockerException, RequestException) as exc:
            raise StreamAttachError(str(exc)) from exc

        stdout = bytearray()
        stderr = bytearray()
        try:
            for out_chunk, err_chunk in stream:
                if out_chunk:
                    stdout.extend(out_chunk)
                if err_chunk:
                    stderr.extend(err_chunk)
        except (DockerException, RequestException) as exc:
            raise StreamAttachError(str(exc)) from exc
        finally:
            close = getattr(stream, "close", None)
            if close is not None:
                close()
        return bytes(stdout), bytes(stderr)
