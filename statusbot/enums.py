"""StrEnum definitions for type-safe constants."""

from enum import StrEnum


class OpcodeKind(StrEnum):
    """Automation script instruction kinds."""

    TAB = "tab"
    SHIFT_TAB = "shift_tab"
    SPACE = "space"
    ESCAPE = "escape"
    ENTER = "enter"
    FIND = "find"
    PASTE = "paste"
    SLEEP = "sleep"
    INPUT_USERNAME = "input_username"
    INPUT_PASSWORD = "input_password"
    INPUT_LITERAL = "input_literal"
    SCREENSHOT = "screenshot"
    CLICK = "click"
    SURVEY_CHECK = "survey_check"
    CHECK_STATUS = "check_status"
    UNKNOWN = "unknown"


class JobStatus(StrEnum):
    """Automation job lifecycle values."""

    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class PortalId(StrEnum):
    """Known journal submission portals."""

    MANUSCRIPT_CENTRAL = "manuscriptcentral"
    EDITORIAL_MANAGER = "editorialmanager"
    TANDF_ONLINE = "tandfonline"
    TAYLOR_FRANCIS = "taylorfrancis"
    CG_SCHOLAR = "cgscholar"
    THE_SCIPUB = "thescipub"
    WILEY_CONNECT = "wiley_connect"
    PERIODICOS = "periodicos"
    TSP_SUBMISSION = "tspsubmission"
    SPRINGER_NATURE = "springernature"


class AutomationStrategy(StrEnum):
    """How a portal is automated."""

    SCRIPT = "script"
    HELPER = "helper"


class RequestLogStatus(StrEnum):
    """Request log status values."""

    STARTED = "started"
    QUEUED = "queued"
    COMPLETED = "completed"
    ERROR = "error"
