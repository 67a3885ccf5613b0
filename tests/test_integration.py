"""
Integration tests for dep-requires.
Tests real subprocess probing, manifests, batch checks and configuration.
"""

import json
import subprocess
import sys
from pathlib import Path

import pytest

from dep_requires import GREATER, EQUAL, LESS, VersionException, probe_version, requires
from dep_requires.checker import CheckStatus, get_requirement_checker
from dep_requires.cli_config import (
    ProbeConfig,
    RequiresConfig,
    create_sample_config,
    get_config,
    load_config,
    reset_config,
    validate_config_values,
)
from dep_requires.dependency import Dependency
from dep_requires.error_handling import ErrorCategory, get_error_handler
from dep_requires.manifest import parse_manifest
from dep_requires.prober import run_probe


class TestRealExecutables:
    """Probe small shell scripts through real subprocesses."""

    def test_version_from_first_flag(self, fake_executable):
        tool = fake_executable("faketool", 'echo "faketool v2.4.1 (build 7)"')

        assert probe_version(str(tool)) == "2.4.1"
        assert requires(str(tool)) is True
        assert requires(str(tool), "2.4.0", GREATER) is True
        assert requires(str(tool), "2.4.1", LESS) is False

    def test_only_double_dash_version_answers(self, fake_executable):
        tool = fake_executable(
            "picky",
            'if [ "$1" = "--version" ]; then echo "picky 3.1.4"; else exit 2; fi',
        )

        assert probe_version(str(tool)) == "3.1.4"

    def test_version_on_stderr(self, fake_executable):
        tool = fake_executable("noisy", 'echo "noisy version 1.22" >&2')

        assert probe_version(str(tool)) == "1.22"
        outcome = run_probe(str(tool), "-v", ProbeConfig(merge_stderr=False))
        assert outcome.version is None

    def test_library_ignores_config_file_and_environment(self, fake_executable, monkeypatch):
        tool = fake_executable("noisy", 'echo "noisy version 1.22" >&2')
        (Path.cwd() / ".dep-requires.json").write_text(
            json.dumps({"probe": {"merge_stderr": False}})
        )
        monkeypatch.setenv("DEP_REQUIRES_MERGE_STDERR", "false")

        assert requires(str(tool), "1.22", EQUAL) is True
        assert get_requirement_checker().check(Dependency(str(tool), "1.22", EQUAL)).ok

    def test_never_reports_version(self, fake_executable):
        tool = fake_executable("mute", 'echo "usage: mute [options]"')

        with pytest.raises(VersionException) as exc_info:
            requires(str(tool), "1.0.0", EQUAL)
        assert exc_info.value.category == ErrorCategory.PROBE

    def test_timeout_moves_to_next_flag(self, fake_executable):
        tool = fake_executable(
            "slow",
            'if [ "$1" = "-v" ]; then exec sleep 5; fi\necho "slow 0.9.1"',
        )

        assert probe_version(str(tool), ProbeConfig(timeout_seconds=0.5)) == "0.9.1"

    def test_missing_path(self, temp_dir):
        ghost = temp_dir / "ghost"
        assert requires(str(ghost)) is False
        with pytest.raises(VersionException):
            requires(str(ghost), "1.0.0", EQUAL)

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell required")
    def test_system_shell_exists(self):
        assert requires("sh") is True


class TestManifestParsing:
    """Test parsing requirement manifests in each format."""

    def test_toml(self, sample_manifest_toml):
        dependencies = parse_manifest(str(sample_manifest_toml))

        by_name = {dep.name: dep for dep in dependencies}
        assert list(by_name) == ["node", "git", "make"]
        assert by_name["node"].operator == GREATER | EQUAL
        assert by_name["node"].version == "18.0.0"
        assert by_name["git"].requirement == "=2.39.2"
        assert by_name["make"].is_existence_only
        assert by_name["make"].requirement == "*"

    def test_json(self, sample_manifest_json):
        dependencies = parse_manifest(str(sample_manifest_json))

        by_name = {dep.name: dep for dep in dependencies}
        assert by_name["node"].operator == LESS
        assert by_name["npm"].version == "9.5.0"
        assert by_name["bash"].is_existence_only

    def test_yaml(self, sample_manifest_yaml):
        dependencies = parse_manifest(str(sample_manifest_yaml))

        by_name = {dep.name: dep for dep in dependencies}
        assert by_name["iptables-save"].requirement == ">1.8"
        assert by_name["curl"].is_existence_only
        assert all(dep.source_file.endswith("tools.yaml") for dep in dependencies)

    def test_missing_tools_table(self, temp_dir):
        manifest = temp_dir / "empty.toml"
        manifest.write_text('[project]\nname = "x"\n')

        with pytest.raises(ValueError, match="tools"):
            parse_manifest(str(manifest))

    def test_invalid_toml(self, temp_dir):
        manifest = temp_dir / "broken.toml"
        manifest.write_text("[tools\nnode = ")

        with pytest.raises(ValueError, match="Invalid TOML"):
            parse_manifest(str(manifest))

    def test_unsupported_extension(self, temp_dir):
        manifest = temp_dir / "tools.txt"
        manifest.write_text("node>=18")

        with pytest.raises(ValueError, match="not allowed"):
            parse_manifest(str(manifest))

    @pytest.mark.parametrize(
        "filename, content",
        [
            ("tools.yaml", "tools:\n  node: 18.10\n"),
            ("tools.toml", "[tools]\nnode = 18.10\n"),
        ],
    )
    def test_unquoted_version_is_rejected(self, temp_dir, filename, content):
        manifest = temp_dir / filename
        manifest.write_text(content)

        with pytest.raises(ValueError, match="must be a quoted string"):
            parse_manifest(str(manifest))

    def test_quoted_version_keeps_trailing_zero(self, temp_dir):
        manifest = temp_dir / "tools.yaml"
        manifest.write_text('tools:\n  node: "18.10"\n')

        assert parse_manifest(str(manifest))[0].version == "18.10"

    def test_bad_constraint_is_reported(self, temp_dir):
        manifest = temp_dir / "bad.json"
        manifest.write_text(json.dumps({"tools": {"node": {"min": "18"}}}))

        with pytest.raises(ValueError):
            parse_manifest(str(manifest))
        assert get_error_handler().get_error_stats().get("MANIFEST_WARNING") == 1


class TestRequirementChecker:
    """Test batch checks over mocked tools."""

    def test_statuses(self, mock_which, mock_run):
        paths = {"node": "/usr/bin/node", "git": "/usr/bin/git", "make": "/usr/bin/make"}
        mock_which.side_effect = lambda name: paths.get(name)
        mock_run.side_effect = lambda cmd, **kwargs: subprocess.CompletedProcess(
            cmd, 0, stdout={"/usr/bin/node": "v18.14.1", "/usr/bin/git": "git version 2.30.1"}.get(cmd[0], "")
        )

        report = get_requirement_checker().check_all(
            [
                Dependency("node", "18.0.0", GREATER | EQUAL),
                Dependency("git", "2.39.2", EQUAL),
                Dependency("make"),
                Dependency("ghost", "1.0", EQUAL),
                Dependency("make", "4.0", GREATER),
            ]
        )

        statuses = [result.status for result in report.results]
        assert statuses == [
            CheckStatus.SATISFIED,
            CheckStatus.UNSATISFIED,
            CheckStatus.SATISFIED,
            CheckStatus.MISSING,
            CheckStatus.ERROR,
        ]
        assert report.results[0].found_version == "18.14.1"
        assert report.results[1].found_version == "2.30.1"
        assert report.total == 5
        assert len(report.failures) == 3
        assert not report.all_satisfied

    def test_invalid_operator_is_error(self, installed_tool):
        installed_tool("1.0.0")

        result = get_requirement_checker().check(
            Dependency("tool", "1.0.0", LESS | GREATER)
        )

        assert result.status == CheckStatus.ERROR
        assert result.found_version == "1.0.0"

    def test_empty_batch(self):
        report = get_requirement_checker().check_all([])
        assert report.total == 0
        assert report.all_satisfied


class TestConfiguration:
    """Test configuration loading and validation."""

    def test_defaults(self):
        config = get_config()
        assert config.probe.timeout_seconds is None
        assert config.probe.merge_stderr is True
        assert config.output.output_format == "console"

    def test_project_file(self, tmp_path):
        (tmp_path / ".dep-requires.toml").write_text(
            "[probe]\ntimeout_seconds = 3.5\n\n[output]\noutput_format = \"json\"\n"
        )

        config = load_config()
        assert config.probe.timeout_seconds == 3.5
        assert config.output.output_format == "json"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DEP_REQUIRES_TIMEOUT", "7")
        monkeypatch.setenv("DEP_REQUIRES_MERGE_STDERR", "false")
        monkeypatch.setenv("DEP_REQUIRES_LOG_LEVEL", "debug")
        reset_config()

        config = get_config()
        assert config.probe.timeout_seconds == 7.0
        assert config.probe.merge_stderr is False
        assert config.logging.log_level == "DEBUG"

    def test_invalid_values_fall_back(self, tmp_path):
        (tmp_path / ".dep-requires.json").write_text(
            json.dumps({"probe": {"timeout_seconds": -1}})
        )

        config = load_config()
        assert config.probe.timeout_seconds is None

    @pytest.mark.parametrize("value", ["0", "-3"])
    def test_non_positive_environment_timeout_is_reported(self, monkeypatch, capsys, value):
        monkeypatch.setenv("DEP_REQUIRES_TIMEOUT", value)

        config = load_config()

        assert config.probe.timeout_seconds is None
        assert "probe.timeout_seconds" in capsys.readouterr().err

    def test_validation_errors(self):
        config = RequiresConfig()
        config.logging.log_level = "LOUD"
        config.output.output_format = "xml"

        errors = validate_config_values(config)
        assert len(errors) == 2

    def test_sample_config_is_valid_json(self):
        data = json.loads(create_sample_config())
        assert set(data) == {"probe", "logging", "output"}
