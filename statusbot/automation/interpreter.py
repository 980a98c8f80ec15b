"""Instruction interpreter: replays a parsed script against a browser.

Opcodes run strictly in order on the calling thread; each one, including
any sleep it issues, finishes before the next starts. The first failing
opcode aborts the rest of the script by raising OpcodeExecutionFailure.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping

from statusbot.automation.context import RunContext
from statusbot.automation.driver import Key, Modifier
from statusbot.automation.routines import StatusRoutine
from statusbot.automation.script import Opcode
from statusbot.enums import OpcodeKind
from statusbot.errors import OpcodeExecutionFailure

logger = logging.getLogger(__name__)

SURVEY_PROMPT_TEXT = "Self-report your data to improve equity in research"

# Named CLICK targets and the element ids they resolve to.
CLICK_TARGETS: dict[str, str] = {
    "input": "USERID",
    "loginButton": "login-button-default",
}

_KEY_OPCODES: dict[OpcodeKind, Key] = {
    OpcodeKind.TAB: Key.TAB,
    OpcodeKind.SPACE: Key.SPACE,
    OpcodeKind.ESCAPE: Key.ESCAPE,
    OpcodeKind.ENTER: Key.ENTER,
}

_CHORD_OPCODES: dict[OpcodeKind, tuple[Modifier, str]] = {
    OpcodeKind.SHIFT_TAB: (Modifier.SHIFT, Key.TAB),
    OpcodeKind.FIND: (Modifier.CONTROL, "f"),
    OpcodeKind.PASTE: (Modifier.CONTROL, "v"),
}


class InstructionInterpreter:
    """Executes automation scripts.

    Args:
        routines: CHECK_STATUS routines keyed by portal routine name.
        unknown_opcode_delay_ms: Pause after an unrecognized instruction;
            0 disables it.
    """

    def __init__(
        self,
        routines: Mapping[str, StatusRoutine],
        *,
        unknown_opcode_delay_ms: int = 0,
    ) -> None:
        self.routines = dict(routines)
        self.unknown_opcode_delay_ms = unknown_opcode_delay_ms

    def run(self, opcodes: list[Opcode], ctx: RunContext) -> None:
        """Run every opcode in order.

        Raises:
            OpcodeExecutionFailure: on the first opcode that fails.
        """
        started = time.perf_counter()
        logger.info("Executing %d instructions for %s", len(opcodes), ctx.portal.portal)

        for opcode in opcodes:
            try:
                self.execute(opcode, ctx)
            except Exception as e:
                raise OpcodeExecutionFailure(opcode.line, opcode.token, e) from e

        logger.info("Execution completed in %.2f seconds", time.perf_counter() - started)

    def execute(self, opcode: Opcode, ctx: RunContext) -> None:
        """Execute a single opcode."""
        driver = ctx.driver
        kind = opcode.kind

        if kind in _KEY_OPCODES:
            driver.press(_KEY_OPCODES[kind])
        elif kind in _CHORD_OPCODES:
            modifier, key = _CHORD_OPCODES[kind]
            driver.chord(modifier, key)
        elif kind is OpcodeKind.SLEEP:
            ctx.sleep(opcode.millis or 0)
        elif kind is OpcodeKind.INPUT_USERNAME:
            driver.type_text(ctx.credential.username)
        elif kind is OpcodeKind.INPUT_PASSWORD:
            driver.type_text(ctx.credential.password)
        elif kind is OpcodeKind.INPUT_LITERAL:
            driver.type_text(opcode.text or "")
            logger.debug("Typed input: %s", opcode.text)
        elif kind is OpcodeKind.SCREENSHOT:
            logger.info("Taking screenshot of current page")
            ctx.capture(ctx.credential.username)
        elif kind is OpcodeKind.CLICK:
            self._click(opcode, ctx)
        elif kind is OpcodeKind.SURVEY_CHECK:
            self.survey_check(ctx)
        elif kind is OpcodeKind.CHECK_STATUS:
            self._check_status(ctx)
        else:
            logger.warning("Unknown instruction at line %d: %s", opcode.line, opcode.token)
            if self.unknown_opcode_delay_ms > 0:
                ctx.sleep(self.unknown_opcode_delay_ms)

    def _click(self, opcode: Opcode, ctx: RunContext) -> None:
        element_id = CLICK_TARGETS.get(opcode.text or "")
        if element_id is None:
            logger.warning("Unknown CLICK target: %s", opcode.text)
            return
        ctx.driver.click_element(element_id)
        logger.info("Clicked on element with target: %s", opcode.text)

    def _check_status(self, ctx: RunContext) -> None:
        routine = self.routines.get(ctx.portal.routine or "")
        if routine is None:
            logger.info("No status routine registered for %s", ctx.portal.portal)
            return
        routine.run(ctx)

    def survey_check(self, ctx: RunContext) -> None:
        """Dismiss the equity survey prompt if it has taken focus, then reload.

        Never raises: on failure one recovery attempt switches to the first
        open window, and if that fails too a warning is logged.
        """
        driver = ctx.driver
        logger.info("Handling survey popup check")
        try:
            main_window = driver.current_window()
            driver.click_body()
            ctx.sleep(1000)

            driver.press(Key.TAB)
            driver.press(Key.TAB)
            text = driver.focused_text()

            if SURVEY_PROMPT_TEXT in text:
                logger.info("Survey prompt has focus, dismissing it")
                driver.press(Key.ENTER)
                handles = driver.window_handles()
                if len(handles) > 1:
                    driver.switch_to_window(handles[-1])
                    driver.close_window()
                driver.switch_to_window(main_window)
                ctx.sleep(1000)

                driver.click_body()
                ctx.sleep(1000)
                for _ in range(4):
                    driver.press(Key.TAB)
                driver.press(Key.ENTER)
            else:
                logger.info("Survey prompt not present")

            driver.refresh()
            ctx.sleep(5000)
            logger.info("Survey check completed, page reloaded")
        except Exception as e:
            logger.warning("Error during survey popup check: %s", e)
            try:
                handles = driver.window_handles()
                if handles:
                    driver.switch_to_window(handles[0])
            except Exception as recovery_error:
                logger.warning("Could not recover window focus: %s", recovery_error)
