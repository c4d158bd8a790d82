"""
Pytest configuration and fixtures for buildbox tests.
"""

import os
from collections import Counter
from pathlib import Path
from typing import Callable

import pytest
from docker.errors import APIError, NotFound
from hypothesis import Verbosity, settings

from buildbox.project import Language, Project, get_descriptor, write_project

# Configure hypothesis settings for property-based testing
settings.register_profile(
    "default",
    max_examples=100,
    verbosity=Verbosity.normal,
    deadline=None,
)

settings.register_profile(
    "ci",
    max_examples=200,
    verbosity=Verbosity.normal,
    deadline=None,
)

settings.register_profile(
    "dev",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


class _Response:
    """Just enough of a requests.Response for docker.errors.APIError."""

    def __init__(self, status_code: int, reason: str = ""):
        self.status_code = status_code
        self.reason = reason
        self.url = "http+docker://localhost/fake"


def conflict(message: str) -> APIError:
    return APIError(message, response=_Response(409, "Conflict"))


class FakeImage:
    def __init__(self, tags: list[str]):
        self.tags = tags


class FakeContainer:
    def __init__(self, engine: "FakeDockerClient", name: str, image: str, options: dict):
        self._engine = engine
        self.id = f"{abs(hash(name)):064x}"[:64]
        self.name = name
        self.image = image
        self.options = options
        self.attrs = {"Name": f"/{name}", "State": {"Running": False, "Status": "created"}}

    def start(self):
        self._engine.calls["container.start"] += 1
        self.attrs["State"] = {"Running": True, "Status": "running"}

    def stop(self):
        self._engine.calls["container.stop"] += 1
        self.attrs["State"] = {"Running": False, "Status": "exited"}

    def remove(self, force: bool = False):
        self._engine.calls["container.remove"] += 1
        if self.attrs["State"]["Running"] and not force:
            raise conflict("container is running")
        self._engine.containers.store.pop(self.name, None)


class FakeImages:
    def __init__(self, engine: "FakeDockerClient"):
        self._engine = engine
        self.tags: list[str] = []

    def list(self):
        self._engine.calls["images.list"] += 1
        return [FakeImage([tag]) for tag in self.tags]


class FakeContainers:
    def __init__(self, engine: "FakeDockerClient"):
        self._engine = engine
        self.store: dict[str, FakeContainer] = {}

    def get(self, name: str) -> FakeContainer:
        self._engine.calls["containers.get"] += 1
        if name not in self.store:
            raise NotFound(f"No such container: {name}")
        return self.store[name]

    def create(self, image: str, **options) -> FakeContainer:
        self._engine.calls["containers.create"] += 1
        name = options["name"]
        if name in self.store:
            raise conflict(f"Conflict. The container name /{name} is already in use")
        container = FakeContainer(self._engine, name, image, options)
        self.store[name] = container
        return container


ExecHandler = Callable[[FakeContainer, list], tuple[int, bytes, bytes]]


class FakeAPI:
    def __init__(self, engine: "FakeDockerClient"):
        self._engine = engine
        self.pull_records: list[dict] = [{"status": "Pulling from library"}, {"status": "Done"}]
        self.pulled: list[tuple[str, str]] = []
        self.exec_handler: ExecHandler = lambda container, argv: (0, b"", b"")
        self.exec_options: list[dict] = []
        self.fail_exec_start: Exception | None = None
        self._execs: dict[str, dict] = {}

    def pull(self, repository: str, tag: str | None = None, stream: bool = False, decode: bool = False):
        self._engine.calls["api.pull"] += 1
        self.pulled.append((repository, tag))
        for record in self.pull_records:
            yield record
        if not any("error" in record for record in self.pull_records):
            self._engine.images.tags.append(f"{repository}:{tag}")

    def exec_create(self, container: str, cmd, **options) -> dict:
        self._engine.calls["api.exec_create"] += 1
        if container not in self._engine.containers.store:
            raise NotFound(f"No such container: {container}")
        target = self._engine.containers.store[container]
        if not target.attrs["State"]["Running"]:
            raise conflict(f"Container {container} is not running")
        exec_id = f"exec{len(self._execs):060d}"
        self._execs[exec_id] = {"container": target, "cmd": list(cmd), "exit_code": None}
        self.exec_options.append({"container": container, "cmd": list(cmd), **options})
        return {"Id": exec_id}

    def exec_start(self, exec_id: str, detach: bool = False, stream: bool = False, demux: bool = False):
        self._engine.calls["api.exec_start"] += 1
        if self.fail_exec_start is not None:
            raise self.fail_exec_start
        record = self._execs[exec_id]
        if detach:
            return b""
        exit_code, stdout, stderr = self.exec_handler(record["container"], record["cmd"])
        record["exit_code"] = exit_code
        chunks = []
        if stdout:
            chunks.append((stdout, None))
        if stderr:
            half = len(stderr) // 2
            chunks.append((None, stderr[:half]))
            chunks.append((None, stderr[half:]))
        return iter(chunks)

    def exec_inspect(self, exec_id: str) -> dict:
        self._engine.calls["api.exec_inspect"] += 1
        return {"ID": exec_id, "Running": False, "ExitCode": self._execs[exec_id]["exit_code"]}


class FakeDockerClient:
    """In-memory stand-in for docker.DockerClient with per-method call counters."""

    def __init__(self):
        self.calls: Counter = Counter()
        self.images = FakeImages(self)
        self.containers = FakeContainers(self)
        self.api = FakeAPI(self)

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    def ping(self) -> bool:
        self.calls["ping"] += 1
        return True

    def version(self) -> dict:
        self.calls["version"] += 1
        return {"Version": "99.0.0-fake"}


@pytest.fixture
def fake_engine() -> FakeDockerClient:
    return FakeDockerClient()


@pytest.fixture
def sandbox_dir(tmp_path) -> Path:
    path = tmp_path / "sandbox"
    path.mkdir()
    return path


@pytest.fixture
def python_project() -> Project:
    return Project(
        manifest="pytest\n",
        solution="def add(a, b):\n    return a + b\n",
        test="from solution import add\n\n\ndef test_add():\n    assert add(2, 3) == 5\n",
    )


@pytest.fixture
def write_python_project(sandbox_dir) -> Callable[[Project], Path]:
    def _write(project: Project) -> Path:
        write_project(get_descriptor(Language.PYTHON), project, sandbox_dir)
        return sandbox_dir

    return _write
