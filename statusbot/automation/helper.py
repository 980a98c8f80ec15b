"""Out-of-process automation helpers for portals the script engine can't drive.

Contract: the helper is invoked as

    <python> <helpers_dir>/<name>_handler.py <url> <username> <password>

and must print a single JSON object as its final stdout line:

    {"status": "success", "screenshots": ["/tmp/a.png", ...]}
    {"status": "error", "error": "..."}

A non-zero exit, a timeout, or an unparsable final line is a failure.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from statusbot.errors import HelperProcessFailure
from statusbot.observability.redaction import redact_text

logger = logging.getLogger(__name__)


@dataclass
class HelperResult:
    status: str
    artifact_paths: list[Path] = field(default_factory=list)


def parse_helper_output(stdout: str) -> HelperResult:
    """Parse the final stdout line of a helper run.

    Raises:
        HelperProcessFailure: if the line is missing, not JSON, not an
            object, or reports a non-success status.
    """
    lines = stdout.strip().splitlines()
    if not lines:
        raise HelperProcessFailure("Helper produced no output")

    try:
        payload = json.loads(lines[-1])
    except json.JSONDecodeError as e:
        raise HelperProcessFailure("Failed to parse helper output") from e

    if not isinstance(payload, dict):
        raise HelperProcessFailure("Helper output is not a JSON object")

    status = str(payload.get("status", ""))
    screenshots = payload.get("screenshots")
    if status != "success" or not isinstance(screenshots, list):
        raise HelperProcessFailure(payload.get("error") or "Failed to get screenshots")

    return HelperResult(
        status=status,
        artifact_paths=[Path(str(p)) for p in screenshots],
    )


class AlternateStrategyRunner:
    """Runs named helper scripts synchronously."""

    def __init__(
        self,
        helpers_dir: str | Path,
        *,
        python: str = "python",
        timeout_seconds: float = 600,
    ) -> None:
        self.helpers_dir = Path(helpers_dir)
        self.python = python
        self.timeout_seconds = timeout_seconds

    def script_for(self, helper: str) -> Path:
        return self.helpers_dir / f"{helper}_handler.py"

    def run(self, helper: str, url: str, username: str, password: str) -> HelperResult:
        """Run a helper and return the artifacts it produced.

        Raises:
            HelperProcessFailure: on timeout, non-zero exit or bad output.
        """
        script = self.script_for(helper)
        logger.info("Starting %s helper for URL: %s", helper, url)

        try:
            completed = subprocess.run(
                [self.python, str(script), url, username, password],
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise HelperProcessFailure(
                f"Helper {helper} timed out after {self.timeout_seconds:.0f}s"
            ) from e
        except OSError as e:
            raise HelperProcessFailure(f"Helper {helper} could not be started: {e}") from e

        secrets = (username, password)
        if completed.stderr:
            logger.warning(
                "%s helper stderr: %s", helper, redact_text(completed.stderr, secrets=secrets)
            )
        if completed.returncode != 0:
            raise HelperProcessFailure(
                f"Process exited with code {completed.returncode}: "
                f"{redact_text(completed.stderr or '', secrets=secrets, max_chars=500)}"
            )

        result = parse_helper_output(completed.stdout)
        logger.info("%s helper produced %d screenshots", helper, len(result.artifact_paths))
        return result
