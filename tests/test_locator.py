"""Locator chain: candidate order, actionability, stabilization, matcher compilation."""

import pytest

from autoapply.actions.params import cand, el, text
from autoapply.core.action import LogicalAction
from autoapply.core.result import AttemptOutcome
from autoapply.engine.locator import LocatorChain

from conftest import FakeDriver, FakeElement


def _chain(driver: FakeDriver) -> LocatorChain:
    return LocatorChain(driver, driver.page, settle_ms=0)


CHAIN = (
    cand("specific", el("button", "apply-btn")),
    cand("text", text("button", "Apply")),
)


@pytest.mark.asyncio
async def test_earlier_candidate_wins_regardless_of_document_order(driver: FakeDriver) -> None:
    generic = driver.page.root.append(FakeElement("button", "Apply"))
    specific = driver.page.root.append(FakeElement("button", "Apply now", cls="apply-btn"))

    res = await _chain(driver).resolve_in(CHAIN)

    assert res.found and res.element is specific
    assert res.candidate.name == "specific" and res.index == 0
    assert generic is not res.element


@pytest.mark.asyncio
async def test_disabled_match_falls_through_to_next_candidate(driver: FakeDriver) -> None:
    driver.page.root.append(FakeElement("button", "Apply", cls="apply-btn", enabled=False))
    fallback = driver.page.root.append(FakeElement("button", "Apply"))

    res = await _chain(driver).resolve_in(CHAIN)

    assert res.element is fallback
    assert res.candidate.name == "text"


@pytest.mark.asyncio
async def test_nothing_matching_is_not_found(driver: FakeDriver) -> None:
    driver.page.root.append(FakeElement("button", "Next"))

    res = await _chain(driver).resolve_in(CHAIN)

    assert res.outcome is AttemptOutcome.NOT_FOUND
    assert not res.found


@pytest.mark.asyncio
async def test_only_blocked_matches_is_found_but_not_actionable(driver: FakeDriver) -> None:
    driver.page.root.append(FakeElement("button", "Apply", cls="apply-btn", visible=False))

    res = await _chain(driver).resolve_in(CHAIN)

    assert res.outcome is AttemptOutcome.FOUND_BUT_NOT_ACTIONABLE
    assert res.candidate.name == "specific"


@pytest.mark.asyncio
async def test_offscreen_match_is_stabilized_by_scrolling(driver: FakeDriver) -> None:
    btn = driver.page.root.append(
        FakeElement("button", "Apply", cls="apply-btn", visible=False, reveal_on_scroll=True)
    )

    res = await _chain(driver).resolve_in(CHAIN)

    assert res.element is btn
    assert driver.slept == [0]


@pytest.mark.asyncio
async def test_query_error_counts_as_no_match(driver: FakeDriver) -> None:
    driver.fail_query = True
    res = await _chain(driver).resolve_in(CHAIN)
    assert res.outcome is AttemptOutcome.NOT_FOUND


@pytest.mark.asyncio
async def test_scope_restricts_search_to_subtree(driver: FakeDriver) -> None:
    card = driver.page.root.append(FakeElement("div", cls="card"))
    driver.page.root.append(FakeElement("button", "Apply", cls="apply-btn"))
    inside = card.append(FakeElement("button", "Apply"))

    res = await _chain(driver).resolve_in(CHAIN, scope=card)

    assert res.element is inside


@pytest.mark.asyncio
async def test_resolve_uses_registered_chain(driver: FakeDriver) -> None:
    driver.page.root.append(FakeElement("a", "Next page", cls="next"))
    res = await _chain(driver).resolve(LogicalAction.GO_TO_NEXT_PAGE)
    assert res.found and res.candidate.matcher.classes == ("next",)


def test_matcher_matches_and_compiles() -> None:
    m = el("button", "btn", attrs={"ng-click": "applyBulk()"}, text="Apply", exclude=["btn-primary"])

    assert m.matches("BUTTON", {"class": "btn btn-lg", "ng-click": "applyBulk()"}, "Apply All")
    assert not m.matches("button", {"class": "btn btn-primary", "ng-click": "applyBulk()"}, "Apply")
    assert not m.matches("button", {"class": "btn", "ng-click": "applyBulk()"}, "Close")
    assert m.to_selector() == 'button.btn[ng-click="applyBulk()"]:has-text("Apply"):not(.btn-primary)'


def test_matcher_attribute_substring_and_empty_selector() -> None:
    m = el(contains={"class": "opportunity"})
    assert m.matches("div", {"class": "my-opportunity-row"})
    assert not m.matches("div", {})
    assert m.to_selector() == '[class*="opportunity"]'
    assert el().to_selector() == "*"
