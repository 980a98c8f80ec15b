"""Automation script format and the file-backed script catalogue.

Scripts are plain text, one instruction per line:

    SLEEP3000
    TAB
    INPUTUSR
    TAB
    INPUTPASS
    ENTER
    CHKREGQS
    CHKSTS

Blank lines and lines starting with ``#`` are ignored. Any other line that
is not a known instruction parses to an UNKNOWN opcode so the interpreter
can report it.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from statusbot.enums import OpcodeKind
from statusbot.errors import UnknownPortal

if TYPE_CHECKING:
    from statusbot.automation.portals import PortalRule

logger = logging.getLogger(__name__)

_EXACT_TOKENS: dict[str, OpcodeKind] = {
    "TAB": OpcodeKind.TAB,
    "SHIFTTAB": OpcodeKind.SHIFT_TAB,
    "SPACE": OpcodeKind.SPACE,
    "ESC": OpcodeKind.ESCAPE,
    "ENTER": OpcodeKind.ENTER,
    "FIND": OpcodeKind.FIND,
    "PASTE": OpcodeKind.PASTE,
    "INPUTUSR": OpcodeKind.INPUT_USERNAME,
    "INPUTPASS": OpcodeKind.INPUT_PASSWORD,
    "SCRNSHT": OpcodeKind.SCREENSHOT,
    "CHKREGQS": OpcodeKind.SURVEY_CHECK,
    "CHKSTS": OpcodeKind.CHECK_STATUS,
}

_DIGITS = re.compile(r"\d+")


@dataclass(frozen=True)
class Opcode:
    """One parsed script instruction."""

    kind: OpcodeKind
    line: int
    token: str
    text: str | None = None
    millis: int | None = None


def parse_line(token: str, line: int) -> Opcode:
    """Parse one trimmed, non-empty script line."""
    kind = _EXACT_TOKENS.get(token)
    if kind is not None:
        return Opcode(kind=kind, line=line, token=token)

    if token.startswith("SLEEP"):
        match = _DIGITS.search(token)
        if match:
            return Opcode(
                kind=OpcodeKind.SLEEP, line=line, token=token, millis=int(match.group())
            )
    elif token.startswith("INPUT-"):
        return Opcode(
            kind=OpcodeKind.INPUT_LITERAL,
            line=line,
            token=token,
            text=token[len("INPUT-"):],
        )
    elif token.startswith("CLICK"):
        parts = token.split("-", 1)
        target = parts[1] if len(parts) > 1 else ""
        return Opcode(kind=OpcodeKind.CLICK, line=line, token=token, text=target)

    return Opcode(kind=OpcodeKind.UNKNOWN, line=line, token=token)


def parse_script(source: str) -> list[Opcode]:
    """Parse script text into opcodes, preserving order and line numbers."""
    opcodes: list[Opcode] = []
    for number, raw in enumerate(source.splitlines(), start=1):
        token = raw.strip()
        if not token or token.startswith("#"):
            continue
        opcodes.append(parse_line(token, number))
    return opcodes


class ScriptCatalogue:
    """Loads per-portal scripts from a directory.

    Scripts are read on every call so operators can change automation
    behavior without restarting the service.
    """

    def __init__(self, scripts_dir: str | Path) -> None:
        self.scripts_dir = Path(scripts_dir)

    def path_for(self, rule: "PortalRule") -> Path:
        if not rule.script_file:
            raise UnknownPortal(f"No script registered for portal {rule.portal}")
        return self.scripts_dir / rule.script_file

    def load(self, rule: "PortalRule") -> list[Opcode]:
        """Read and parse the script registered for a portal.

        Raises:
            UnknownPortal: if the portal has no script or the file is missing.
        """
        path = self.path_for(rule)
        try:
            source = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise UnknownPortal(f"Script file not found for {rule.portal}: {path}") from e

        opcodes = parse_script(source)
        logger.info("Loaded %d instructions for %s from %s", len(opcodes), rule.portal, path.name)
        return opcodes
