"""Unit tests for the alternate-strategy helper runner."""

import json
import sys
import textwrap
from pathlib import Path

import pytest

from statusbot.automation.helper import AlternateStrategyRunner, parse_helper_output
from statusbot.errors import HelperProcessFailure


class TestParseHelperOutput:
    def test_uses_final_line(self):
        stdout = "starting\nlogged in\n" + json.dumps(
            {"status": "success", "screenshots": ["/tmp/a.png", "/tmp/b.png"]}
        )

        result = parse_helper_output(stdout)

        assert result.status == "success"
        assert result.artifact_paths == [Path("/tmp/a.png"), Path("/tmp/b.png")]

    def test_empty_screenshot_list_is_success(self):
        result = parse_helper_output('{"status": "success", "screenshots": []}')

        assert result.artifact_paths == []

    @pytest.mark.parametrize(
        "stdout",
        [
            "",
            "not json at all",
            '["status", "success"]',
            '{"status": "error", "error": "login failed"}',
            '{"status": "success"}',
            '{"status": "success", "screenshots": "a.png"}',
        ],
    )
    def test_malformed_or_failed_output(self, stdout):
        with pytest.raises(HelperProcessFailure):
            parse_helper_output(stdout)

    def test_error_message_is_surfaced(self):
        with pytest.raises(HelperProcessFailure, match="login failed"):
            parse_helper_output('{"status": "error", "error": "login failed"}')


def _write_helper(directory: Path, name: str, body: str) -> None:
    (directory / f"{name}_handler.py").write_text(textwrap.dedent(body))


class TestAlternateStrategyRunner:
    def test_runs_helper_with_url_and_credentials(self, tmp_path):
        _write_helper(
            tmp_path,
            "tandf",
            """
            import json, sys
            url, user, password = sys.argv[1:4]
            print("working on", url)
            print(json.dumps({"status": "success", "screenshots": [user + ".png"]}))
            """,
        )
        runner = AlternateStrategyRunner(tmp_path, python=sys.executable, timeout_seconds=30)

        result = runner.run("tandf", "https://www.tandfonline.com", "alice", "pw")

        assert result.artifact_paths == [Path("alice.png")]

    def test_non_zero_exit_is_failure(self, tmp_path):
        _write_helper(
            tmp_path,
            "wiley",
            """
            import sys
            sys.stderr.write("password pw rejected")
            sys.exit(3)
            """,
        )
        runner = AlternateStrategyRunner(tmp_path, python=sys.executable, timeout_seconds=30)

        with pytest.raises(HelperProcessFailure) as exc_info:
            runner.run("wiley", "https://wiley.scienceconnect.io", "alice", "pw")

        assert "code 3" in str(exc_info.value)
        assert "pw rejected" not in str(exc_info.value)

    def test_timeout_is_failure(self, tmp_path):
        _write_helper(
            tmp_path,
            "tandf",
            """
            import time
            time.sleep(10)
            """,
        )
        runner = AlternateStrategyRunner(tmp_path, python=sys.executable, timeout_seconds=0.5)

        with pytest.raises(HelperProcessFailure, match="timed out"):
            runner.run("tandf", "https://www.tandfonline.com", "alice", "pw")

    def test_missing_interpreter_is_failure(self, tmp_path):
        runner = AlternateStrategyRunner(tmp_path, python=str(tmp_path / "no-python"))

        with pytest.raises(HelperProcessFailure):
            runner.run("tandf", "https://www.tandfonline.com", "alice", "pw")
