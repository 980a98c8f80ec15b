"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest
import pytest_asyncio

from statusbot.automation.context import RunContext
from statusbot.automation.driver import Key, Modifier
from statusbot.automation.portals import resolve_portal
from statusbot.database import Database
from statusbot.models.domain import Credential

# Configure pytest-asyncio to auto-detect async tests
pytest_plugins = ("pytest_asyncio",)


class FakeDriver:
    """Scripted stand-in for a browser.

    Each TAB advances focus to the next entry of `focus_texts`; past the
    end the focused text is empty. CTRL+ENTER opens a new window.
    Every call is recorded in `calls`.
    """

    def __init__(
        self,
        focus_texts=(),
        *,
        navigate_error: Exception | None = None,
        fail_on: set[str] | None = None,
    ):
        self.focus_texts = list(focus_texts)
        self.navigate_error = navigate_error
        self.fail_on = fail_on or set()
        self.calls: list[tuple] = []
        self.handles = ["main"]
        self.current = "main"
        self.focus_index = 0
        self.quit_count = 0
        self._opened = 0

    def _record(self, *call):
        self.calls.append(call)
        if call[0] in self.fail_on:
            raise RuntimeError(f"{call[0]} failed")

    def navigate(self, url, timeout):
        self._record("navigate", url)
        if self.navigate_error is not None:
            raise self.navigate_error

    def navigate_in_place(self, url):
        self._record("navigate_in_place", url)

    def press(self, key):
        self._record("press", key)
        if key == Key.TAB:
            self.focus_index += 1

    def chord(self, modifier, key):
        self._record("chord", modifier, key)
        if modifier == Modifier.CONTROL and key == Key.ENTER:
            self._opened += 1
            self.handles.append(f"popup-{self._opened}")

    def type_text(self, text):
        self._record("type", text)

    def focused_text(self):
        self._record("focused_text")
        if 0 < self.focus_index <= len(self.focus_texts):
            return self.focus_texts[self.focus_index - 1]
        return ""

    def window_handles(self):
        return list(self.handles)

    def current_window(self):
        return self.current

    def switch_to_window(self, handle):
        self._record("switch", handle)
        self.current = handle

    def close_window(self):
        self._record("close", self.current)
        self.handles.remove(self.current)

    def refresh(self):
        self._record("refresh")

    def click_element(self, element_id):
        self._record("click", element_id)

    def click_body(self):
        self._record("click_body")

    def screenshot_png(self):
        self._record("screenshot")
        return b"\x89PNG\r\n\x1a\nfake"

    def quit(self):
        self.quit_count += 1
        self._record("quit")

    def keys_pressed(self):
        return [c[1] for c in self.calls if c[0] == "press"]


@pytest.fixture
def fake_driver_cls():
    """The FakeDriver class, for tests that build their own."""
    return FakeDriver


@pytest.fixture
def credential():
    return Credential(
        url="https://www.editorialmanager.com/jrnl/default.aspx",
        username="author@example.org",
        password="s3cret-pass",
    )


@pytest.fixture
def make_context(credential):
    """Build a RunContext around a driver with recorded sleeps and captures."""

    def _make(driver, *, url: str | None = None, found_labels=None):
        sleeps: list[int] = []
        captures: list[str] = []

        def capture(label: str) -> Path:
            captures.append(label)
            return Path(f"/tmp/{len(captures)}.png")

        cred = credential if url is None else credential.model_copy(update={"url": url})
        ctx = RunContext(
            driver=driver,
            credential=cred,
            portal=resolve_portal(cred.url),
            capture=capture,
            sleep=sleeps.append,
            found_labels=found_labels if found_labels is not None else [],
        )
        ctx.sleeps = sleeps  # type: ignore[attr-defined]
        ctx.captures = captures  # type: ignore[attr-defined]
        return ctx

    return _make


@pytest_asyncio.fixture
async def test_db():
    """Create a fresh in-memory database for each test."""
    db = Database("sqlite+aiosqlite:///:memory:")
    await db.init_db()
    yield db
    await db.close()
