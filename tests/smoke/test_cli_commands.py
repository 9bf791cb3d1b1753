"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent


@pytest.fixture
def profile_dir(tmp_path):
    return tmp_path / "profiles"


@pytest.fixture
def cli(profile_dir):
    """Runner bound to an isolated profile directory."""

    def run(command: str, input: str | None = None, timeout: int = 30) -> tuple[int, str, str]:
        """
        Run a CLI command and return exit code, stdout, stderr.

        Args:
            command: The command to run (after 'python -m stepwise.delivery')
            input: Text fed to stdin for interactive commands
            timeout: Maximum time to wait

        Returns:
            Tuple of (exit_code, stdout, stderr)
        """
        env = {
            **os.environ,
            "STEPWISE_PROFILE_DIR": str(profile_dir),
            "STEPWISE_LOG_LEVEL": "WARNING",
            "PYTHONIOENCODING": "utf-8",
            "COLUMNS": "120",
        }
        result = subprocess.run(
            f"{sys.executable} -m stepwise.delivery {command}",
            shell=True,
            cwd=PROJECT_ROOT,
            env=env,
            input=input,
            capture_output=True,
            text=True,
            encoding="utf-8",
            timeout=timeout,
        )
        return result.returncode, result.stdout, result.stderr

    return run


@pytest.fixture
def with_profile(cli):
    code, _, stderr = cli('new-profile "Ada"')
    assert code == 0, f"new-profile failed: {stderr}"
    return cli


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self, cli):
        """Main help should display without errors."""
        code, stdout, stderr = cli("--help")

        assert code == 0, f"Help failed: {stderr}"
        assert "stepwise" in stdout.lower()
        assert "Commands" in stdout

    def test_practice_help(self, cli):
        code, stdout, stderr = cli("practice --help")

        assert code == 0, f"Help failed: {stderr}"
        assert "subject" in stdout.lower()


class TestCLIProfiles:
    """Test profile management."""

    def test_new_profile_writes_file(self, with_profile, profile_dir):
        data = json.loads((profile_dir / "ada.json").read_text(encoding="utf-8"))

        assert data["display_name"] == "Ada"
        assert "7x8" in data["words"]

    def test_duplicate_profile_rejected(self, with_profile):
        code, stdout, _ = with_profile('new-profile "Ada"')

        assert code == 1
        assert "already exists" in stdout

    def test_profiles_lists(self, with_profile):
        code, stdout, stderr = with_profile("profiles")

        assert code == 0, f"profiles failed: {stderr}"
        assert "Ada" in stdout

    def test_no_profile_yet(self, cli):
        code, stdout, _ = cli("status")

        assert code == 1
        assert "new-profile" in stdout


class TestCLISubjects:
    def test_subjects_runs(self, with_profile):
        code, stdout, stderr = with_profile("subjects")

        assert code == 0, f"subjects failed: {stderr}"
        assert "mathtables" in stdout
        assert "humanbody" in stdout


class TestCLIPractice:
    """Drive the interactive loop through stdin."""

    def test_practice_round(self, with_profile, profile_dir):
        code, stdout, stderr = with_profile("--seed 3 practice mathtables", input="c\nn\nq\n")

        assert code == 0, f"practice failed: {stderr}"
        assert "Correct!" in stdout
        assert "Practice Set" in stdout

        data = json.loads((profile_dir / "ada.json").read_text(encoding="utf-8"))
        assert data["active_session_by_subject"]["mathtables"] in data["sessions"]
        attempted = [w for w in data["words"].values() if w["attempts"]]
        assert len(attempted) == 1

    def test_practice_survives_end_of_input(self, with_profile):
        code, stdout, stderr = with_profile("practice humanbody", input="r\n")

        assert code == 0, f"practice failed: {stderr}"
        assert "paused" in stdout

    def test_unknown_subject(self, with_profile):
        code, stdout, _ = with_profile("practice geography")

        assert code == 1
        assert "Unknown subject" in stdout


class TestCLISettings:
    def test_set_size(self, with_profile):
        code, stdout, stderr = with_profile("set-size mathtables 5")

        assert code == 0, f"set-size failed: {stderr}"
        assert "5" in stdout

    def test_set_level_clamped(self, with_profile, profile_dir):
        code, _, stderr = with_profile("set-level mathtables 99")

        assert code == 0, f"set-level failed: {stderr}"
        data = json.loads((profile_dir / "ada.json").read_text(encoding="utf-8"))
        assert data["settings"]["mathtables"]["unlocked_level"] == 10

    def test_select(self, with_profile):
        code, stdout, stderr = with_profile("select humanbody english")

        assert code == 0, f"select failed: {stderr}"
        assert "humanbody, english" in stdout


class TestCLIStats:
    def test_status_runs(self, with_profile):
        code, stdout, stderr = with_profile("status")

        assert code == 0, f"status failed: {stderr}"
        assert "Math Tables" in stdout

    def test_stats_runs(self, with_profile):
        code, stdout, stderr = with_profile("stats mathtables")

        assert code == 0, f"stats failed: {stderr}"
        assert "Progress Statistics" in stdout
        assert "Traceback" not in stderr
