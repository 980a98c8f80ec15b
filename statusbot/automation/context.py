"""Per-run state shared by the interpreter and the status routines."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from statusbot.automation.driver import RemoteUIDriver
    from statusbot.automation.portals import PortalRule
    from statusbot.models.domain import Credential


def sleep_ms(ms: int) -> None:
    time.sleep(ms / 1000)


@dataclass
class RunContext:
    """Everything one script run needs.

    `capture` stores a screenshot of the driver's current view in the
    session's artifact namespace under the given label and returns its path.
    `found_labels` accumulates the status labels captured so far so that a
    second CHECK_STATUS in the same script does not capture them again.
    """

    driver: "RemoteUIDriver"
    credential: "Credential"
    portal: "PortalRule"
    capture: Callable[[str], Path]
    sleep: Callable[[int], None] = sleep_ms
    found_labels: list[str] = field(default_factory=list)
