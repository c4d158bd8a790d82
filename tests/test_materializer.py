"""Tests for writing and reading generated projects."""

import pytest

from buildbox.core.exceptions import ProjectFileMissingError
from buildbox.project import FileRole, Project, get_descriptor, read_project_sources, write_project


def test_write_project_creates_layout(tmp_path, python_project):
    sandbox = tmp_path / "sandbox"
    written = write_project(get_descriptor("python"), python_project, sandbox)

    assert [path.name for path in written] == ["requirements.txt", "solution.py", "test.py"]
    assert (sandbox / "solution.py").read_text() == python_project.solution


def test_write_project_clears_previous_contents(sandbox_dir, python_project):
    stale = sandbox_dir / "stale.txt"
    stale.write_text("left over")

    write_project(get_descriptor("python"), python_project, sandbox_dir)

    assert not stale.exists()


def test_nested_paths_are_created(tmp_path):
    project = Project(manifest="<project/>", solution="class Solution {}", test="class SolutionTest {}")
    write_project(get_descriptor("java"), project, tmp_path / "sb")

    assert (tmp_path / "sb/src/main/java/com/example/solution/Solution.java").exists()
    assert (tmp_path / "sb/src/test/java/com/example/solution/SolutionTest.java").exists()


def test_extra_config_required_for_typescript(tmp_path):
    project = Project(manifest="{}", solution="export {}", test="")
    with pytest.raises(ValueError, match="extra config"):
        write_project(get_descriptor("typescript"), project, tmp_path / "sb")


def test_read_project_sources_round_trips_line_endings(sandbox_dir):
    project = Project(manifest="a\r\nb\r\n", solution="x = 1\n", test="")
    write_project(get_descriptor("python"), project, sandbox_dir)

    assert read_project_sources(get_descriptor("python"), sandbox_dir) == ["a\r\nb\r\n", "x = 1\n", ""]


def test_read_project_sources_uses_key_order(tmp_path):
    project = Project(manifest="M", solution="S", test="T", extra_configs=("C",))
    write_project(get_descriptor("typescript"), project, tmp_path / "sb")

    assert read_project_sources(get_descriptor("typescript"), tmp_path / "sb") == ["M", "S", "T", "C"]


def test_missing_file_raises(sandbox_dir, python_project):
    write_project(get_descriptor("python"), python_project, sandbox_dir)
    (sandbox_dir / "test.py").unlink()

    with pytest.raises(ProjectFileMissingError) as excinfo:
        read_project_sources(get_descriptor("python"), sandbox_dir)
    assert excinfo.value.path.endswith("test.py")


def test_text_for_roles():
    project = Project(manifest="m", solution="s", test="t", extra_configs=("c0", "c1"))
    assert project.text_for(FileRole.MANIFEST) == "m"
    assert project.text_for(FileRole.TEST) == "t"
    assert project.text_for(FileRole.EXTRA_CONFIG, 1) == "c1"
