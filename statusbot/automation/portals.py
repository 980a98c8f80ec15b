"""Portal resolution: which script, routine and strategy apply to a URL.

Rules are checked in order and the first rule with a matching hostname
fragment wins, so more specific fragments must come before broader ones.
"""

from __future__ import annotations

from dataclasses import dataclass

from statusbot.enums import AutomationStrategy, PortalId
from statusbot.errors import UnknownPortal


@dataclass(frozen=True)
class PortalRule:
    """One row of the portal table."""

    portal: PortalId
    matchers: tuple[str, ...]
    strategy: AutomationStrategy = AutomationStrategy.SCRIPT
    script_file: str | None = None
    routine: str | None = None
    helper: str | None = None

    def matches(self, url: str) -> bool:
        lowered = url.lower()
        return any(m in lowered for m in self.matchers)


PORTAL_RULES: tuple[PortalRule, ...] = (
    PortalRule(
        portal=PortalId.MANUSCRIPT_CENTRAL,
        matchers=("manuscriptcentral",),
        script_file="manus_KEYS.txt",
        routine="manuscriptcentral",
    ),
    PortalRule(
        portal=PortalId.EDITORIAL_MANAGER,
        matchers=("editorialmanager",),
        script_file="edito_KEYS.txt",
        routine="editorialmanager",
    ),
    PortalRule(
        portal=PortalId.TANDF_ONLINE,
        matchers=("tandfonline",),
        strategy=AutomationStrategy.HELPER,
        helper="tandf",
    ),
    PortalRule(
        portal=PortalId.TAYLOR_FRANCIS,
        matchers=("taylorfrancis",),
        script_file="taylo_KEYS.txt",
    ),
    PortalRule(
        portal=PortalId.CG_SCHOLAR,
        matchers=("cgscholar",),
        script_file="cgsch_KEYS.txt",
        routine="cgscholar",
    ),
    PortalRule(
        portal=PortalId.THE_SCIPUB,
        matchers=("thescipub",),
        script_file="thesc_KEYS.txt",
        routine="thescipub",
    ),
    PortalRule(
        portal=PortalId.WILEY_CONNECT,
        matchers=("wiley.scienceconnect.io", "onlinelibrary.wiley"),
        strategy=AutomationStrategy.HELPER,
        helper="wiley",
    ),
    PortalRule(
        portal=PortalId.PERIODICOS,
        matchers=("periodicos",),
        script_file="perio_KEYS.txt",
    ),
    PortalRule(
        portal=PortalId.TSP_SUBMISSION,
        matchers=("tspsubmission",),
        script_file="tspsu_KEYS.txt",
    ),
    PortalRule(
        portal=PortalId.SPRINGER_NATURE,
        matchers=("springernature",),
        script_file="springer_KEYS.txt",
    ),
)


def resolve_portal(
    url: str, rules: tuple[PortalRule, ...] = PORTAL_RULES
) -> PortalRule:
    """Return the first rule matching `url`.

    Raises:
        UnknownPortal: if no rule matches.
    """
    for rule in rules:
        if rule.matches(url):
            return rule
    raise UnknownPortal(f"No automation registered for URL: {url}")
