"""Unit tests for the CHECK_STATUS routines."""

import pytest

from statusbot.automation.driver import Key, Modifier
from statusbot.automation.interpreter import InstructionInterpreter
from statusbot.automation.routines import (
    CG_SCHOLAR_WITHDRAWAL_URL,
    EDITORIAL_MANAGER_CATALOGUE,
    MANUSCRIPT_CENTRAL_SETTLE_MS,
    CatalogueSweepRoutine,
    MarkerRoutine,
    NavigateRoutine,
    SettleRoutine,
    default_routines,
)
from statusbot.automation.script import parse_script

CATALOGUE = ("A", "B", "C")


class TestCatalogueSweepRoutine:
    def test_search_then_sweep_until_non_member(self, fake_driver_cls, make_context):
        driver = fake_driver_cls(focus_texts=["Home", "A", "B", "", "C", "Logout", "A"])
        ctx = make_context(driver)

        captured = CatalogueSweepRoutine("Test", CATALOGUE).run(ctx)

        assert captured == ["A", "B", "C"]
        assert ctx.captures == ["A", "B", "C"]
        assert driver.focus_index == 6

    @pytest.mark.parametrize("size", [1, 4, 13, 40])
    def test_sweep_stops_at_first_label_outside_catalogue(
        self, size, fake_driver_cls, make_context
    ):
        labels = tuple(f"Status {i}" for i in range(size))
        driver = fake_driver_cls(focus_texts=["Nav", *labels, "Outside", labels[0]])
        ctx = make_context(driver)

        captured = CatalogueSweepRoutine("Test", labels, max_attempts=size + 5).run(ctx)

        assert captured == list(labels)
        assert driver.focus_index == size + 2

    def test_each_capture_opens_and_closes_a_window(self, fake_driver_cls, make_context):
        driver = fake_driver_cls(focus_texts=["A", "Outside"])
        ctx = make_context(driver)

        CatalogueSweepRoutine("Test", CATALOGUE).run(ctx)

        assert ("chord", Modifier.CONTROL, Key.ENTER) in driver.calls
        assert ("close", "popup-1") in driver.calls
        assert driver.handles == ["main"]
        assert driver.current == "main"
        assert ("press", Key.HOME) in driver.calls
        assert ctx.sleeps[:2] == [5000, 2000]

    def test_labels_already_found_are_not_recaptured(self, fake_driver_cls, make_context):
        driver = fake_driver_cls(focus_texts=["A", "B", "Outside"])
        ctx = make_context(driver, found_labels=["A"])

        captured = CatalogueSweepRoutine("Test", CATALOGUE).run(ctx)

        assert captured == ["B"]
        assert ctx.found_labels == ["A", "B"]

    def test_nothing_found_within_attempt_bound(self, fake_driver_cls, make_context):
        driver = fake_driver_cls(focus_texts=["x"] * 50)
        ctx = make_context(driver)

        captured = CatalogueSweepRoutine("Test", CATALOGUE, max_attempts=20).run(ctx)

        assert captured == []
        assert driver.focus_index == 20

    def test_sweep_is_bounded(self, fake_driver_cls, make_context):
        driver = fake_driver_cls(focus_texts=["A"])
        ctx = make_context(driver)

        CatalogueSweepRoutine("Test", CATALOGUE, max_attempts=7).run(ctx)

        assert driver.focus_index == 1 + 7

    def test_capture_failure_during_search_recovers(self, fake_driver_cls, make_context):
        driver = fake_driver_cls(focus_texts=["A", "B", "Outside"], fail_on={"chord"})
        driver.current = "stray"
        ctx = make_context(driver)

        captured = CatalogueSweepRoutine("Test", CATALOGUE).run(ctx)

        assert captured == []
        assert ("switch", "main") in driver.calls
        assert ctx.found_labels == ["A", "B"]

    def test_editorial_manager_catalogue(self):
        assert len(EDITORIAL_MANAGER_CATALOGUE) == 13
        assert "Submissions Being Processed" in EDITORIAL_MANAGER_CATALOGUE


class TestMarkerRoutine:
    def test_captures_marked_entries_after_skipped_steps(
        self, fake_driver_cls, make_context
    ):
        texts = ["Menu (1)", "Profile (1)", "Inbox", "Under Review (1)"] + ["x"] * 9
        driver = fake_driver_cls(focus_texts=texts)
        ctx = make_context(driver, url="https://thescipub.com/login")

        captured = MarkerRoutine("The SciPub", "(1)").run(ctx)

        assert captured == ["Under Review (1)"]
        assert driver.keys_pressed().count(Key.TAB) == 13

    def test_no_marked_entries(self, fake_driver_cls, make_context):
        driver = fake_driver_cls(focus_texts=["x"] * 13)

        assert MarkerRoutine("The SciPub", "(1)").run(make_context(driver)) == []


class TestNavigateRoutine:
    def test_opens_listing_and_waits(self, fake_driver_cls, make_context):
        driver = fake_driver_cls()
        ctx = make_context(driver)

        captured = NavigateRoutine("CG Scholar", CG_SCHOLAR_WITHDRAWAL_URL).run(ctx)

        assert captured == []
        assert driver.calls == [("navigate_in_place", CG_SCHOLAR_WITHDRAWAL_URL)]
        assert ctx.sleeps == [5000]


def test_default_routines():
    routines = default_routines()

    assert set(routines) == {
        "editorialmanager",
        "thescipub",
        "manuscriptcentral",
        "cgscholar",
    }
    assert isinstance(routines["editorialmanager"], CatalogueSweepRoutine)


def test_settle_routine_only_waits(fake_driver_cls, make_context):
    driver = fake_driver_cls()
    ctx = make_context(driver, url="https://mc.manuscriptcentral.com/jrnl")

    captured = SettleRoutine("ScholarOne", wait_ms=MANUSCRIPT_CENTRAL_SETTLE_MS).run(ctx)

    assert captured == []
    assert driver.calls == []
    assert ctx.sleeps == [20_000]


def test_manuscript_central_check_status_waits(fake_driver_cls, make_context):
    driver = fake_driver_cls()
    ctx = make_context(driver, url="https://mc.manuscriptcentral.com/jrnl")

    InstructionInterpreter(default_routines()).run(parse_script("CHKSTS\nSCRNSHT\n"), ctx)

    assert ctx.sleeps == [20_000]
    assert ctx.captures == ["author@example.org"]
