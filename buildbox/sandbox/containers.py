"""
Container lifecycle management.

One long-lived container per language, named ``<prefix>_<lang>_container``,
with the host sandbox directory bind-mounted at the configured in-container
workdir. Image axis: absent / present. Container axis: absent / stopped /
running.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import docker
from docker.errors import APIError, DockerException, NotFound
from docker.utils import parse_repository_tag
from requests.exceptions import RequestException

from ..core.config import DockerConfig
from ..core.exceptions import (
    ContainerAlreadyExistsError,
    ContainerNotFoundError,
    ContainerOperationError,
    EngineUnavailableError,
    ImagePullError,
)
from ..core.logging import get_logger
from ..project.languages import Language, LanguageDescriptor, get_descriptor
from .runtimes.docker_runtime import check_health

logger = get_logger(__name__)


def current_user() -> str | None:
    """Numeric ``uid:gid`` of this process, or None on hosts without POSIX ids."""
    getuid = getattr(os, "getuid", None)
    getgid = getattr(os, "getgid", None)
    if getuid is None or getgid is None:
        return None
    return f"{getuid()}:{getgid()}"


def container_name(language: str | Language, prefix: str = "buildbox") -> str:
    return f"{prefix}_{Language.parse(language).tag}_container"


def normalize_image_ref(reference: str) -> str:
    """``python`` -> ``python:latest``; references with a tag are unchanged."""
    repository, tag = parse_repository_tag(reference)
    if tag and tag.startswith("sha256:"):
        return f"{repository}@{tag}"
    return f"{repository}:{tag or 'latest'}"


@contextmanager
def _engine_call(action: str) -> Iterator[None]:
    try:
        yield
    except RequestException as exc:
        raise EngineUnavailableError(str(exc)) from exc
    except DockerException as exc:
        raise ContainerOperationError(f"Couldn't {action}: {exc}") from exc


def _is_running(container: Any) -> bool:
    state = container.attrs.get("State") or {}
    return bool(state.get("Running"))


class ContainerLifecycleManager:
    """Keeps the per-language container present and running."""

    def __init__(
        self,
        client: docker.DockerClient,
        *,
        sandbox_dir: Path,
        config: DockerConfig | None = None,
        user: str | None = None,
        verbose: bool = False,
    ):
        self.client = client
        self.sandbox_dir = Path(sandbox_dir)
        self.config = config or DockerConfig()
        self.user = user if user is not None else current_user()
        self.verbose = verbose

    def descriptor(self, language: str | Language) -> LanguageDescriptor:
        return get_descriptor(language, self.config.images)

    def container_name(self, language: str | Language) -> str:
        return container_name(language, self.config.container_prefix)

    def check_health(self) -> tuple[bool, str]:
        return check_health(self.client)

    # Image axis

    def image_exists(self, language: str | Language) -> bool:
        """
        Check whether the language image is available locally.

        ``exact`` mode compares normalized ``repo:tag`` references. ``substring``
        mode reproduces the legacy check (any tag containing the language tag),
        which gives false positives such as ``java`` matching a ``javascript``
        image.
        """
        descriptor = self.descriptor(language)
        with _engine_call("list images"):
            images = self.client.images.list()
        tags = [tag for image in images for tag in (image.tags or [])]

        if self.config.image_match == "substring":
            return any(descriptor.tag in tag for tag in tags)

        wanted = normalize_image_ref(descriptor.image)
        return any(normalize_image_ref(tag) == wanted for tag in tags)

    def pull_image(self, language: str | Language) -> bool:
        """
        Pull the language image, streaming progress to completion.

        Returns:
            True if a pull happened, False if the image was already present

        Raises:
            ImagePullError: on transport errors or an error record in the stream
        """
        descriptor = self.descriptor(language)
        if self.image_exists(language):
            logger.debug("Image %s already present", descriptor.image)
            return False

        repository, tag = parse_repository_tag(descriptor.image)
        logger.info("Pulling image %s", descriptor.image)
        try:
            progress = self.client.api.pull(
                repository, tag=tag or "latest", stream=True, decode=True
            )
            for record in progress:
                if not isinstance(record, dict):
                    continue
                if record.get("error"):
                    detail = (record.get("errorDetail") or {}).get("message") or record["error"]
                    raise ImagePullError(descriptor.image, str(detail))
                if self.verbose:
                    logger.info(
                        "%s: %s %s",
                        descriptor.image,
                        record.get("status", ""),
                        record.get("progress", ""),
                    )
        except (DockerException, RequestException) as exc:
            raise ImagePullError(descriptor.image, str(exc)) from exc

        logger.info("Image %s pulled", descriptor.image)
        return True

    # Container axis

    def _get(self, name: str) -> Any | None:
        with _engine_call(f"inspect container {name}"):
            try:
                return self.client.containers.get(name)
            except NotFound:
                return None

    def container_exists(self, language: str | Language) -> bool:
        return self._get(self.container_name(language)) is not None

    def is_running(self, language: str | Language) -> bool:
        container = self._get(self.container_name(language))
        return container is not None and _is_running(container)

    def create_container(self, language: str | Language) -> str:
        """
        Create the language container in the Created/Stopped state.

        Returns:
            The container name

        Raises:
            ContainerAlreadyExistsError: when the name is taken
        """
        descriptor = self.descriptor(language)
        name = self.container_name(language)
        if self._get(name) is not None:
            raise ContainerAlreadyExistsError(name)

        self.sandbox_dir.mkdir(parents=True, exist_ok=True)
        host_path = str(self.sandbox_dir.resolve())
        options: dict[str, Any] = {
            "command": [self.config.shell],
            "name": name,
            "tty": True,
            "stdin_open": True,
            "working_dir": self.config.container_workdir,
            "volumes": {host_path: {"bind": self.config.container_workdir, "mode": "rw"}},
        }
        if self.user:
            options["user"] = self.user

        logger.info("Creating container %s from %s", name, descriptor.image)
        with _engine_call(f"create container {name}"):
            try:
                container = self.client.containers.create(descriptor.image, **options)
            except APIError as exc:
                if exc.status_code == 409:
                    raise ContainerAlreadyExistsError(name) from exc
                raise

        if self.verbose:
            logger.info("Container %s created (%s), %s -> %s", name, container.id[:12],
                        host_path, self.config.container_workdir)
        return name

    def start(self, language: str | Language) -> bool:
        """
        Make sure the container is running. Idempotent.

        Returns:
            True if the container was started by this call, False if it was already running

        Raises:
            ContainerNotFoundError: when the container does not exist
        """
        name = self.container_name(language)
        container = self._get(name)
        if container is None:
            raise ContainerNotFoundError(name)
        if _is_running(container):
            logger.debug("Container %s already running", name)
            return False

        with _engine_call(f"start container {name}"):
            container.start()
        logger.info("Container %s is running", name)
        return True

    def stop(self, language: str | Language) -> bool:
        """Stop a running container. Returns False if it was not running."""
        name = self.container_name(language)
        container = self._get(name)
        if container is None:
            raise ContainerNotFoundError(name)
        if not _is_running(container):
            logger.info("Container %s is not running", name)
            return False

        with _engine_call(f"stop container {name}"):
            container.stop()
        logger.info("Container %s stopped", name)
        return True

    def remove(self, language: str | Language) -> bool:
        """Force-remove the container in any state. Returns False if it was absent."""
        name = self.container_name(language)
        container = self._get(name)
        if container is None:
            return False

        with _engine_call(f"remove container {name}"):
            try:
                container.remove(force=True)
            except NotFound:
                return False
        logger.info("Container %s removed", name)
        return True

    def ensure_ready(self, language: str | Language) -> str:
        """Pull, create and start as needed. Returns the running container's name."""
        self.pull_image(language)
        name = self.container_name(language)
        if self._get(name) is None:
            self.create_container(language)
        self.start(language)
        return name
