"""Tests for YAML loading: defaults, include: directives, --include."""

import sys

import pytest

from buildchecker.core import yaml_settings
from buildchecker.core.config import State
from buildchecker.core.yaml_settings import (
    YamlWithIncludesSettingsSource,
    cli_includes,
)

MINIMAL = """
config:
  buildkite:
    organization: acme
    pipeline: widgets
  github:
    owner: acme
    repo: widgets
"""


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Empty working directory, no user config, no CLI arguments."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(sys, "argv", ["buildchecker"])
    monkeypatch.setattr(
        yaml_settings, "user_config_dir",
        lambda *args, **kwargs: str(tmp_path / "user-config"),
    )
    return tmp_path


def load(yaml_file=None):
    return YamlWithIncludesSettingsSource(State, yaml_file=yaml_file)()


def test_package_defaults_always_loaded(workdir):
    data = load()

    check = data["config"]["check"]
    assert check["failures_threshold"] == 3
    assert check["lock_reason"] == "dev-experience"
    assert data["config"]["github"]["branch"] == "main"


def test_project_file_merges_over_defaults(workdir):
    (workdir / "buildchecker.yaml").write_text(
        MINIMAL + "  check:\n    failures_threshold: 5\n"
    )

    data = load()

    assert data["config"]["github"]["repo"] == "widgets"
    assert data["config"]["github"]["branch"] == "main"
    assert data["config"]["check"]["failures_threshold"] == 5
    assert data["config"]["check"]["builds_limit"] == 99


def test_user_config_loaded_before_project(workdir):
    user_dir = workdir / "user-config"
    user_dir.mkdir()
    (user_dir / "buildchecker.yaml").write_text(
        "config:\n  check:\n    failures_threshold: 7\n    builds_limit: 50\n"
    )
    (workdir / "buildchecker.yaml").write_text(
        "config:\n  check:\n    failures_threshold: 4\n"
    )

    check = load()["config"]["check"]

    assert check["failures_threshold"] == 4
    assert check["builds_limit"] == 50


def test_include_directive(workdir):
    (workdir / "team.yaml").write_text(
        "config:\n  team:\n    teammates:\n      - name: Ann\n        github: ann\n"
    )
    (workdir / "main.yaml").write_text("include: team.yaml\n" + MINIMAL)

    data = load(str(workdir / "main.yaml"))

    assert data["config"]["team"]["teammates"] == [
        {"name": "Ann", "github": "ann"}
    ]
    assert "include" not in data


def test_including_file_wins(workdir):
    (workdir / "base.yaml").write_text(
        "config:\n  check:\n    failures_threshold: 9\n    build_timeout: 60\n"
    )
    (workdir / "main.yaml").write_text(
        "include: [base.yaml]\nconfig:\n  check:\n    failures_threshold: 2\n"
    )

    check = load(str(workdir / "main.yaml"))["config"]["check"]

    assert check["failures_threshold"] == 2
    assert check["build_timeout"] == 60


def test_nested_include_relative_to_including_file(workdir):
    sub = workdir / "conf"
    sub.mkdir()
    (sub / "leaf.yaml").write_text("config:\n  slack:\n    webhook_url: https://hook\n")
    (sub / "middle.yaml").write_text("include: leaf.yaml\n")
    (workdir / "top.yaml").write_text("include: conf/middle.yaml\n")

    data = load(str(workdir / "top.yaml"))

    assert data["config"]["slack"]["webhook_url"] == "https://hook"


def test_circular_include(workdir):
    (workdir / "a.yaml").write_text("include: b.yaml\n")
    (workdir / "b.yaml").write_text("include: a.yaml\n")

    with pytest.raises(ValueError, match="Circular include"):
        load(str(workdir / "a.yaml"))


def test_cli_include_overrides_project_file(workdir, monkeypatch):
    (workdir / "buildchecker.yaml").write_text(MINIMAL)
    (workdir / "ci.yaml").write_text("config:\n  github:\n    branch: release\n")
    monkeypatch.setattr(
        sys, "argv", ["buildchecker", "check", "--include", "ci.yaml"]
    )

    data = load()

    assert data["config"]["github"]["branch"] == "release"
    assert data["config"]["github"]["repo"] == "widgets"


def test_cli_include_without_project_file(workdir, monkeypatch):
    (workdir / "only.yaml").write_text(MINIMAL)
    monkeypatch.setattr(sys, "argv", ["buildchecker", "--include", "only.yaml"])

    assert load()["config"]["buildkite"]["pipeline"] == "widgets"


def test_cli_includes_parsing():
    argv = ["prog", "--include", "a.yaml", "check", "--include", "b.yaml",
            "--dry-run", "--include"]

    assert cli_includes(argv) == ["a.yaml", "b.yaml"]
    assert cli_includes(["prog"]) == []
