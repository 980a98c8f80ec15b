"""Remote UI driver capability and its selenium implementation.

The automation core only talks to `RemoteUIDriver`; everything
selenium-specific lives in `SeleniumDriver` so the interpreter and the
status routines can be exercised against a scripted fake.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver import ActionChains
from selenium.webdriver.chrome.options import Options as ChromeOptions
from selenium.webdriver.chrome.service import Service as ChromeService
from selenium.webdriver.common.by import By
from selenium.webdriver.common.keys import Keys

from statusbot.errors import NavigationTimeout

if TYPE_CHECKING:
    from statusbot.config import BotConfig

logger = logging.getLogger(__name__)


class Key(StrEnum):
    """Keys the automation scripts are allowed to send."""

    TAB = "tab"
    SPACE = "space"
    ESCAPE = "escape"
    ENTER = "enter"
    HOME = "home"


class Modifier(StrEnum):
    CONTROL = "control"
    SHIFT = "shift"


_SELENIUM_KEYS: dict[str, str] = {
    Key.TAB: Keys.TAB,
    Key.SPACE: Keys.SPACE,
    Key.ESCAPE: Keys.ESCAPE,
    Key.ENTER: Keys.RETURN,
    Key.HOME: Keys.HOME,
    Modifier.CONTROL: Keys.CONTROL,
    Modifier.SHIFT: Keys.SHIFT,
}


class RemoteUIDriver(Protocol):
    """What the automation core needs from a browser session."""

    def navigate(self, url: str, timeout: float) -> None: ...

    def press(self, key: Key) -> None: ...

    def chord(self, modifier: Modifier, key: Key | str) -> None: ...

    def type_text(self, text: str) -> None: ...

    def focused_text(self) -> str: ...

    def window_handles(self) -> list[str]: ...

    def current_window(self) -> str: ...

    def switch_to_window(self, handle: str) -> None: ...

    def close_window(self) -> None: ...

    def refresh(self) -> None: ...

    def navigate_in_place(self, url: str) -> None: ...

    def click_element(self, element_id: str) -> None: ...

    def click_body(self) -> None: ...

    def screenshot_png(self) -> bytes: ...

    def quit(self) -> None: ...


class SeleniumDriver:
    """`RemoteUIDriver` backed by a selenium WebDriver."""

    def __init__(self, driver: webdriver.Remote) -> None:
        self._driver = driver

    @property
    def raw(self) -> webdriver.Remote:
        return self._driver

    def _actions(self) -> ActionChains:
        return ActionChains(self._driver)

    def navigate(self, url: str, timeout: float) -> None:
        """Load a URL; exceeding `timeout` seconds is a hard failure."""
        self._driver.set_page_load_timeout(timeout)
        try:
            self._driver.get(url)
        except TimeoutException as e:
            raise NavigationTimeout(f"Navigation to portal exceeded {timeout:.0f}s") from e

    def navigate_in_place(self, url: str) -> None:
        self._driver.get(url)

    def press(self, key: Key) -> None:
        self._actions().send_keys(_SELENIUM_KEYS[key]).perform()

    def chord(self, modifier: Modifier, key: Key | str) -> None:
        mod = _SELENIUM_KEYS[modifier]
        k = _SELENIUM_KEYS.get(key, key)
        self._actions().key_down(mod).send_keys(k).key_up(mod).perform()

    def type_text(self, text: str) -> None:
        self._actions().send_keys(text).perform()

    def focused_text(self) -> str:
        """Text of the focused element, descending into focused iframes."""
        element = self._driver.switch_to.active_element
        while element.tag_name == "iframe":
            self._driver.switch_to.frame(element)
            element = self._driver.switch_to.active_element
        return element.text or ""

    def window_handles(self) -> list[str]:
        return list(self._driver.window_handles)

    def current_window(self) -> str:
        return self._driver.current_window_handle

    def switch_to_window(self, handle: str) -> None:
        self._driver.switch_to.window(handle)

    def close_window(self) -> None:
        self._driver.close()

    def refresh(self) -> None:
        self._driver.refresh()

    def click_element(self, element_id: str) -> None:
        self._driver.find_element(By.ID, element_id).click()

    def click_body(self) -> None:
        self._driver.find_element(By.TAG_NAME, "body").click()

    def screenshot_png(self) -> bytes:
        return self._driver.get_screenshot_as_png()

    def quit(self) -> None:
        self._driver.quit()


class SeleniumDriverFactory:
    """Builds one headless Chrome session per credential run."""

    BASE_ARGUMENTS = (
        "--no-sandbox",
        "--disable-dev-shm-usage",
        "--window-size=1920,1080",
        "--incognito",
    )

    def __init__(self, config: "BotConfig") -> None:
        self.config = config

    def __call__(self) -> SeleniumDriver:
        options = ChromeOptions()
        if self.config.headless:
            options.add_argument("--headless")
        for arg in self.BASE_ARGUMENTS:
            options.add_argument(arg)

        service = (
            ChromeService(executable_path=self.config.chrome_driver_path)
            if self.config.chrome_driver_path
            else ChromeService()
        )
        try:
            driver = webdriver.Chrome(service=service, options=options)
        except WebDriverException:
            logger.exception("Failed to start Chrome")
            raise
        logger.info("Chrome session started")
        return SeleniumDriver(driver)
