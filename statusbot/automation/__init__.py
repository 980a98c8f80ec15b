"""Browser automation engine: scripts, interpreter, status routines."""

from statusbot.automation.context import RunContext
from statusbot.automation.interpreter import InstructionInterpreter
from statusbot.automation.portals import PORTAL_RULES, PortalRule, resolve_portal
from statusbot.automation.routines import StatusRoutine, default_routines
from statusbot.automation.script import Opcode, ScriptCatalogue, parse_script

__all__ = [
    "InstructionInterpreter",
    "Opcode",
    "PORTAL_RULES",
    "PortalRule",
    "RunContext",
    "ScriptCatalogue",
    "StatusRoutine",
    "default_routines",
    "parse_script",
    "resolve_portal",
]
