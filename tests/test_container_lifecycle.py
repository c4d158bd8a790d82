"""Tests for per-language container lifecycle management."""

import pytest
import requests
from docker.errors import DockerException

from buildbox.core.config import DockerConfig
from buildbox.core.exceptions import (
    ContainerAlreadyExistsError,
    ContainerNotFoundError,
    ContainerOperationError,
    EngineUnavailableError,
    ImagePullError,
)
from buildbox.sandbox import ContainerLifecycleManager, container_name
from buildbox.sandbox.containers import normalize_image_ref


@pytest.fixture
def manager(fake_engine, sandbox_dir):
    return ContainerLifecycleManager(fake_engine, sandbox_dir=sandbox_dir, user="1000:1000")


def test_container_name_convention():
    assert container_name("python") == "buildbox_python_container"
    assert container_name("Kotlin", prefix="ci") == "ci_kotlin_container"


@pytest.mark.parametrize(
    ("reference", "expected"),
    [
        ("python", "python:latest"),
        ("python:3.12", "python:3.12"),
        ("localhost:5000/team/node:20", "localhost:5000/team/node:20"),
        ("localhost:5000/team/node", "localhost:5000/team/node:latest"),
    ],
)
def test_normalize_image_ref(reference, expected):
    assert normalize_image_ref(reference) == expected


def test_image_exists_exact_match(fake_engine, manager):
    fake_engine.images.tags = ["python:3.12"]
    assert manager.image_exists("python") is True
    assert manager.image_exists("java") is False


def test_exact_match_does_not_confuse_java_with_javascript(fake_engine, sandbox_dir):
    fake_engine.images.tags = ["node:20", "javascript-tools:latest"]
    exact = ContainerLifecycleManager(fake_engine, sandbox_dir=sandbox_dir)
    substring = ContainerLifecycleManager(
        fake_engine, sandbox_dir=sandbox_dir, config=DockerConfig(image_match="substring")
    )

    assert exact.image_exists("java") is False
    assert substring.image_exists("java") is True


def test_pull_image_skips_present_image(fake_engine, manager):
    fake_engine.images.tags = ["python:3.12"]
    assert manager.pull_image("python") is False
    assert fake_engine.calls["api.pull"] == 0


def test_pull_image_streams_to_completion(fake_engine, manager):
    assert manager.pull_image("python") is True
    assert fake_engine.api.pulled == [("python", "3.12")]
    assert manager.image_exists("python") is True


def test_pull_image_defaults_tag_to_latest(fake_engine, sandbox_dir):
    manager = ContainerLifecycleManager(
        fake_engine, sandbox_dir=sandbox_dir, config=DockerConfig(images={"rust": "rust"})
    )
    manager.pull_image("rust")
    assert fake_engine.api.pulled == [("rust", "latest")]


def test_pull_image_error_record_raises(fake_engine, manager):
    fake_engine.api.pull_records = [
        {"status": "Pulling"},
        {"error": "manifest unknown", "errorDetail": {"message": "manifest for python:3.12 not found"}},
    ]
    with pytest.raises(ImagePullError, match="manifest for python:3.12 not found"):
        manager.pull_image("python")


def test_pull_image_transport_error_raises(fake_engine, manager, monkeypatch):
    def _broken_pull(*args, **kwargs):
        raise requests.exceptions.ConnectionError("connection refused")

    monkeypatch.setattr(fake_engine.api, "pull", _broken_pull)
    with pytest.raises(ImagePullError, match="connection refused"):
        manager.pull_image("python")


def test_create_container_mounts_sandbox(fake_engine, manager, sandbox_dir):
    name = manager.create_container("python")

    assert name == "buildbox_python_container"
    container = fake_engine.containers.store[name]
    assert container.image == "python:3.12"
    assert container.options["tty"] is True
    assert container.options["command"] == ["/bin/sh"]
    assert container.options["working_dir"] == "/app"
    assert container.options["user"] == "1000:1000"
    assert container.options["volumes"] == {str(sandbox_dir.resolve()): {"bind": "/app", "mode": "rw"}}
    assert manager.is_running("python") is False


def test_create_container_twice_raises(manager):
    manager.create_container("python")
    with pytest.raises(ContainerAlreadyExistsError):
        manager.create_container("python")


def test_create_container_conflict_from_engine(fake_engine, manager, monkeypatch):
    # Another client created the container between the existence check and create.
    real_create = fake_engine.containers.create

    def _racing_create(image, **options):
        real_create(image, **options)
        return real_create(image, **options)

    monkeypatch.setattr(fake_engine.containers, "create", _racing_create)
    with pytest.raises(ContainerAlreadyExistsError):
        manager.create_container("python")


def test_start_is_idempotent(fake_engine, manager):
    manager.create_container("python")

    assert manager.start("python") is True
    assert manager.start("python") is False
    assert manager.is_running("python") is True
    assert fake_engine.calls["container.start"] == 1


def test_start_missing_container_raises(manager):
    with pytest.raises(ContainerNotFoundError, match="Create it first"):
        manager.start("python")


def test_stop_then_start(manager):
    manager.create_container("python")
    manager.start("python")

    assert manager.stop("python") is True
    assert manager.stop("python") is False
    assert manager.is_running("python") is False
    assert manager.start("python") is True


def test_stop_missing_container_raises(manager):
    with pytest.raises(ContainerNotFoundError):
        manager.stop("python")


def test_remove_running_container_then_start_fails(manager):
    manager.create_container("python")
    manager.start("python")

    assert manager.remove("python") is True
    assert manager.container_exists("python") is False
    with pytest.raises(ContainerNotFoundError):
        manager.start("python")


def test_remove_absent_container_returns_false(manager):
    assert manager.remove("python") is False


def test_ensure_ready_from_scratch_and_again(fake_engine, manager):
    assert manager.ensure_ready("python") == "buildbox_python_container"
    assert manager.is_running("python") is True
    assert fake_engine.calls["api.pull"] == 1
    assert fake_engine.calls["containers.create"] == 1

    manager.ensure_ready("python")
    assert fake_engine.calls["api.pull"] == 1
    assert fake_engine.calls["containers.create"] == 1


def test_engine_errors_are_translated(fake_engine, manager, monkeypatch):
    def _refused(*args, **kwargs):
        raise requests.exceptions.ConnectionError("socket gone")

    monkeypatch.setattr(fake_engine.containers, "get", _refused)
    with pytest.raises(EngineUnavailableError, match="socket gone"):
        manager.container_exists("python")

    def _rejected(*args, **kwargs):
        raise DockerException("bad request")

    monkeypatch.setattr(fake_engine.containers, "get", _rejected)
    with pytest.raises(ContainerOperationError, match="bad request"):
        manager.is_running("python")


def test_check_health(manager):
    healthy, detail = manager.check_health()
    assert healthy is True
    assert "99.0.0-fake" in detail
