"""
Shared fixtures for dep-requires tests.
"""

import os
import stat
import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from dep_requires.cli_config import reset_config
from dep_requires.error_handling import setup_error_handling


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep config files and DEP_REQUIRES_* variables from leaking into tests."""
    for key in list(os.environ):
        if key.startswith("DEP_REQUIRES_"):
            monkeypatch.delenv(key)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    reset_config()
    setup_error_handling()
    yield
    reset_config()


@pytest.fixture
def temp_dir(tmp_path):
    """Directory for files written by a test."""
    work = tmp_path / "work"
    work.mkdir()
    return work


@pytest.fixture
def mock_which():
    """Patch PATH lookup; set ``return_value`` or ``side_effect`` per test."""
    with patch("dep_requires.resolver.shutil.which") as mocked:
        yield mocked


@pytest.fixture
def mock_run():
    """Patch subprocess execution used by the prober."""
    with patch("dep_requires.prober.subprocess.run") as mocked:
        yield mocked


def completed(stdout: str, returncode: int = 0) -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout)


@pytest.fixture
def installed_tool(mock_which, mock_run):
    """A tool on PATH whose every probe prints the given output."""

    def _install(output: str, path: str = "/usr/bin/tool"):
        mock_which.return_value = path
        mock_run.return_value = completed(output)
        return mock_run

    return _install


@pytest.fixture
def fake_executable(temp_dir):
    """Write a small shell script and return its path."""
    if sys.platform == "win32":
        pytest.skip("shell script executables are POSIX only")

    def _make(name: str, body: str) -> Path:
        script = temp_dir / name
        script.write_text(f"#!/bin/sh\n{body}\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make


@pytest.fixture
def sample_manifest_toml(temp_dir):
    content = """[tools]
node = ">=18.0.0"
git = "2.39.2"
make = "*"
"""
    manifest = temp_dir / "tools.toml"
    manifest.write_text(content)
    return manifest


@pytest.fixture
def sample_manifest_json(temp_dir):
    content = '{"tools": {"node": "<20", "npm": ">= 9.5.0", "bash": ""}}'
    manifest = temp_dir / "tools.json"
    manifest.write_text(content)
    return manifest


@pytest.fixture
def sample_manifest_yaml(temp_dir):
    content = """tools:
  iptables-save: ">1.8"
  man: "2.9.1"
  curl:
"""
    manifest = temp_dir / "tools.yaml"
    manifest.write_text(content)
    return manifest
