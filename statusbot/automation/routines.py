"""Per-portal status-check routines invoked by CHECK_STATUS.

Every routine discovers status entries by focus traversal: press TAB,
read the focused element's text, and decide whether it names a status
list worth capturing. Captures open the focused entry in a new window,
screenshot it, close it and return focus to the original window.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import StrEnum

from statusbot.automation.context import RunContext
from statusbot.automation.driver import Key, Modifier

logger = logging.getLogger(__name__)

NEW_WINDOW_LOAD_MS = 5000
FOCUS_RESET_MS = 2000
FOCUS_SETTLE_MS = 1000
MANUSCRIPT_CENTRAL_SETTLE_MS = 20_000


def capture_in_new_window(ctx: RunContext, label: str) -> None:
    """Open the focused entry in a new window, capture it, and come back.

    After returning, HOME puts focus back at the top of the page so the
    next traversal starts from a known anchor.
    """
    driver = ctx.driver
    driver.chord(Modifier.CONTROL, Key.ENTER)
    handles = driver.window_handles()
    driver.switch_to_window(handles[1])
    ctx.sleep(NEW_WINDOW_LOAD_MS)

    logger.info("Capturing status page: %s", label)
    ctx.capture(label)

    driver.close_window()
    driver.switch_to_window(handles[0])
    driver.press(Key.HOME)
    ctx.sleep(FOCUS_RESET_MS)


class StatusRoutine(ABC):
    """A portal-specific CHECK_STATUS implementation."""

    name: str = "routine"

    @abstractmethod
    def run(self, ctx: RunContext) -> list[str]:
        """Traverse the portal's status UI, returning the labels captured."""


class SweepState(StrEnum):
    SEARCHING = "searching"
    SWEEPING = "sweeping"
    DONE = "done"


class CatalogueSweepRoutine(StatusRoutine):
    """Catalogue-driven search followed by a contiguous sweep.

    SEARCHING: advance focus until the text exactly matches a catalogue
    label not yet captured, capture it, then switch to SWEEPING. Each phase
    is bounded by `max_attempts` focus steps.

    SWEEPING: keep advancing; capture unseen catalogue labels and stop at
    the first non-empty text that is not in the catalogue, which marks the
    end of the status list. The catalogue is assumed to be laid out as one
    contiguous block in the page.
    """

    def __init__(
        self,
        name: str,
        catalogue: tuple[str, ...],
        *,
        max_attempts: int = 20,
    ) -> None:
        self.name = name
        self.catalogue = catalogue
        self.max_attempts = max_attempts

    def run(self, ctx: RunContext) -> list[str]:
        logger.info("Starting %s status check", self.name)
        captured: list[str] = []
        try:
            state = self._search(ctx, captured)
            if state is SweepState.SWEEPING:
                self._sweep(ctx, captured)
            else:
                logger.info("No status texts found after %d attempts", self.max_attempts)
        except Exception as e:
            logger.error("Error in %s status check: %s", self.name, e)
        finally:
            logger.info(
                "%s status check completed, captured %d entries", self.name, len(captured)
            )
        return captured

    def _search(self, ctx: RunContext, captured: list[str]) -> SweepState:
        for attempt in range(1, self.max_attempts + 1):
            ctx.driver.press(Key.TAB)
            text = ctx.driver.focused_text()
            logger.debug("Search attempt %d focused: %r", attempt, text)

            if text in self.catalogue and text not in ctx.found_labels:
                logger.info("Found status text: %s", text)
                ctx.found_labels.append(text)
                try:
                    capture_in_new_window(ctx, text)
                    captured.append(text)
                except Exception as e:
                    logger.error("Error capturing %s: %s", text, e)
                    ctx.driver.switch_to_window(ctx.driver.window_handles()[0])
                return SweepState.SWEEPING
        return SweepState.DONE

    def _sweep(self, ctx: RunContext, captured: list[str]) -> None:
        for attempt in range(1, self.max_attempts + 1):
            ctx.driver.press(Key.TAB)
            ctx.sleep(FOCUS_SETTLE_MS)
            text = ctx.driver.focused_text()

            if not text:
                continue

            if text not in self.catalogue:
                logger.info("Reached end of status list at %r (step %d)", text, attempt)
                return

            if text not in ctx.found_labels:
                logger.info("Found additional status: %s", text)
                ctx.found_labels.append(text)
                try:
                    capture_in_new_window(ctx, text)
                    captured.append(text)
                except Exception as e:
                    logger.error("Error capturing additional status %s: %s", text, e)


class MarkerRoutine(StatusRoutine):
    """Fixed-length traversal capturing any entry whose text has a marker.

    No catalogue is consulted; the first `skip` steps are never captured.
    """

    def __init__(self, name: str, marker: str, *, steps: int = 13, skip: int = 2) -> None:
        self.name = name
        self.marker = marker
        self.steps = steps
        self.skip = skip

    def run(self, ctx: RunContext) -> list[str]:
        captured: list[str] = []
        for step in range(self.steps):
            ctx.driver.press(Key.TAB)
            ctx.sleep(FOCUS_SETTLE_MS)
            text = ctx.driver.focused_text()
            logger.debug("Step %d focused: %r", step, text)

            if step >= self.skip and self.marker in text:
                logger.info("Found entry with marker %s: %r", self.marker, text)
                capture_in_new_window(ctx, text)
                captured.append(text)
        return captured


class NavigateRoutine(StatusRoutine):
    """Open a fixed status listing; the script's SCRNSHT does the capture."""

    def __init__(self, name: str, url: str, *, wait_ms: int = 5000) -> None:
        self.name = name
        self.url = url
        self.wait_ms = wait_ms

    def run(self, ctx: RunContext) -> list[str]:
        logger.info("Opening %s status listing", self.name)
        ctx.driver.navigate_in_place(self.url)
        ctx.sleep(self.wait_ms)
        return []


class SettleRoutine(StatusRoutine):
    """No traversal yet; give the dashboard time to finish rendering."""

    def __init__(self, name: str, *, wait_ms: int) -> None:
        self.name = name
        self.wait_ms = wait_ms

    def run(self, ctx: RunContext) -> list[str]:
        logger.info("Waiting %d ms for %s dashboard", self.wait_ms, self.name)
        ctx.sleep(self.wait_ms)
        return []


EDITORIAL_MANAGER_CATALOGUE: tuple[str, ...] = (
    "Submissions Sent Back to Author",
    "Incomplete Submissions",
    "Submissions Waiting for Author's Approval",
    "Submissions Being Processed",
    "Submissions Needing Revision",
    "Revisions Sent Back to Author",
    "Incomplete Submissions Being Revised",
    "Revisions Waiting for Author's Approval",
    "Revisions Being Processed",
    "Declined Revisions",
    "Submissions with a Decision",
    "Submissions with Production Completed",
    "Submission Transfers Waiting for Author's Approval",
)

CG_SCHOLAR_WITHDRAWAL_URL = "https://cgp.cgscholar.com/m/WithdrawalSubmission?init=true"


def default_routines() -> dict[str, StatusRoutine]:
    """Routines keyed by the `routine` name used in the portal table.

    Portals without an entry have no CHECK_STATUS behavior yet.
    """
    return {
        "editorialmanager": CatalogueSweepRoutine(
            "Editorial Manager", EDITORIAL_MANAGER_CATALOGUE
        ),
        "thescipub": MarkerRoutine("The SciPub", "(1)"),
        "manuscriptcentral": SettleRoutine(
            "ScholarOne", wait_ms=MANUSCRIPT_CENTRAL_SETTLE_MS
        ),
        "cgscholar": NavigateRoutine("CG Scholar", CG_SCHOLAR_WITHDRAWAL_URL),
    }
