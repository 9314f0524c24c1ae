# autoapply/core/controller/runner.py
"""
Navigation state machine for one application run.

    UNINITIALIZED -> AUTHENTICATING -> LISTING -> ITEM_LOOP -> PAGINATING -> DONE
                                          ^                        |
                                          +------------------------+

Responsibilities:
- Reach the listing page (escalating load strategies) and authenticate,
  racing three post-login signals, then falling back to a manual login wait
- Clear consent banners and any onboarding dialog once at session start
- One-shot "open primary view" guarded by a latch that never resets
- Enumerate items (primary selectors, then alternative selectors)
- Per item: fields, own detail view, apply, overlays; exactly one ledger entry
- Paginate until the page cap, a missing next control, or two empty pages
- On item failure: save a screenshot artifact (if artifacts_dir is set)

SessionState is owned here and mutated nowhere else.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from ...actions.sites.instahyre import INSTAHYRE, MatcherSet, SiteProfile
from ...engine.actuator import Actuator
from ...engine.ledger import OutcomeLedger
from ...engine.locator import LocatorChain
from ...engine.overlay import OverlayHandler
from ...io.driver import BrowserDriver, race
from ...reporting.schemas import (
    UNKNOWN_ORGANIZATION,
    UNKNOWN_TITLE,
    ItemAttemptOutcome,
    ItemKey,
)
from ..action import LogicalAction
from ..config import RunConfig
from ..errors import AuthenticationError, InvalidTransitionError, NavigationError
from ..result import ActionAttempt, AttemptOutcome
from ..settings import Settings
from ..settings import settings as default_settings

logger = logging.getLogger(__name__)

NO_APPLY_CONTROL = "no apply control found"
EMPTY_PAGE_LIMIT = 2


class RunState(str, Enum):
    UNINITIALIZED = "uninitialized"
    AUTHENTICATING = "authenticating"
    LISTING = "listing"
    ITEM_LOOP = "item_loop"
    PAGINATING = "paginating"
    DONE = "done"


_TRANSITIONS: dict[RunState, frozenset[RunState]] = {
    RunState.UNINITIALIZED: frozenset({RunState.AUTHENTICATING}),
    RunState.AUTHENTICATING: frozenset({RunState.LISTING}),
    RunState.LISTING: frozenset({RunState.ITEM_LOOP, RunState.PAGINATING}),
    RunState.ITEM_LOOP: frozenset({RunState.PAGINATING}),
    RunState.PAGINATING: frozenset({RunState.LISTING, RunState.DONE}),
    RunState.DONE: frozenset(),
}


class Latch:
    """One-way flag: once set it stays set for the lifetime of the run."""

    __slots__ = ("_set",)

    def __init__(self) -> None:
        self._set = False

    @property
    def is_set(self) -> bool:
        return self._set

    def set(self) -> bool:
        """Set the latch. Returns False if it was already set."""
        if self._set:
            return False
        self._set = True
        return True


@dataclass
class SessionState:
    """Engine-wide mutable state. Counts are read from the ledger."""

    ledger: OutcomeLedger
    max_pages: int
    state: RunState = RunState.UNINITIALIZED
    authenticated: bool = False
    current_page_index: int = 1
    pages_visited: int = 0
    consecutive_empty_pages: int = 0
    primary_view: Latch = field(default_factory=Latch)

    @property
    def has_opened_primary_detail_view(self) -> bool:
        return self.primary_view.is_set

    @property
    def applied_count(self) -> int:
        return self.ledger.succeeded

    @property
    def failed_count(self) -> int:
        return self.ledger.failed

    def advance_page(self) -> None:
        if self.current_page_index >= self.max_pages:
            raise InvalidTransitionError(
                f"page index {self.current_page_index} already at cap {self.max_pages}"
            )
        self.current_page_index += 1


@dataclass
class Item:
    """A rendered item; `handle` is only valid until the next navigation."""

    handle: Any
    page_index: int
    position: int
    title: str = UNKNOWN_TITLE
    organization: str = UNKNOWN_ORGANIZATION

    @property
    def key(self) -> ItemKey:
        return (self.page_index, self.position)


class Runner:
    def __init__(
        self,
        driver: BrowserDriver,
        ctx: Any,
        *,
        config: RunConfig,
        site: SiteProfile = INSTAHYRE,
        settings: Settings | None = None,
        artifacts_dir: Path | None = None,
    ) -> None:
        self.driver = driver
        self.ctx = ctx
        self.config = config
        self.site = site
        self.settings = settings or default_settings
        self.artifacts_dir = artifacts_dir or self.settings.artifacts_dir
        if self.artifacts_dir:
            self.artifacts_dir.mkdir(parents=True, exist_ok=True)

        s = self.settings
        self.chain = LocatorChain(driver, ctx, settle_ms=s.settle_ms)
        self.actuator = Actuator(
            driver,
            ctx,
            self.chain,
            standard_timeout_ms=s.standard_click_timeout_ms,
            forced_timeout_ms=s.forced_click_timeout_ms,
            settle_ms=s.settle_ms,
        )
        self.overlays = OverlayHandler(
            driver,
            ctx,
            self.actuator,
            site,
            secondary_timeout_ms=s.secondary_apply_timeout_ms,
            settle_ms=s.settle_ms,
            max_consent_dismissals=s.max_consent_dismissals,
        )
        self.ledger = OutcomeLedger()
        self.state = SessionState(ledger=self.ledger, max_pages=config.settings.max_pages)

    # ---------------- driver loop ----------------

    async def run(self) -> OutcomeLedger:
        self._transition(RunState.AUTHENTICATING)
        await self._open_listing()
        await self.overlays.dismiss_banners()
        await self.overlays.resolve()
        await self._authenticate()

        self._transition(RunState.LISTING)
        await self._ensure_on_listing()
        await self.overlays.dismiss_banners()
        await self.overlays.resolve()

        while self.state.state is not RunState.DONE:
            if self.state.state is RunState.LISTING:
                items = await self._list_items()
                if items:
                    self._transition(RunState.ITEM_LOOP)
                    await self._process_items(items)
                else:
                    self.state.consecutive_empty_pages += 1
                    logger.warning(
                        "No items found on page %d; moving to next page or stopping",
                        self.state.current_page_index,
                    )
                self._transition(RunState.PAGINATING)
            else:
                await self._paginate()

        logger.info(
            "Run finished: %d applied, %d failed, %d page(s) visited",
            self.state.applied_count,
            self.state.failed_count,
            self.state.pages_visited,
        )
        return self.ledger

    def _transition(self, to: RunState) -> None:
        current = self.state.state
        if to not in _TRANSITIONS[current]:
            raise InvalidTransitionError(f"{current.value} -> {to.value}")
        logger.debug("state %s -> %s", current.value, to.value)
        self.state.state = to

    # ---------------- navigation & authentication ----------------

    async def _open_listing(self) -> None:
        s = self.settings
        logger.info("Navigating to %s jobs page...", self.site.name)
        for wait_until, timeout in (
            ("domcontentloaded", s.navigation_timeout_ms),
            ("load", s.fallback_navigation_timeout_ms),
        ):
            try:
                await self.driver.goto(
                    self.ctx, self.site.listing_url, timeout_ms=timeout, wait_until=wait_until
                )
                break
            except Exception as e:  # noqa: BLE001
                logger.warning("Navigation (%s) failed: %s", wait_until, e)
        else:
            await self._open_listing_from_home()

        await race(
            self._wait_any("login_form", self.site.login_form_signals, s.landing_probe_timeout_ms)
            | self._wait_any("items", self.site.item_list_signals, s.landing_probe_timeout_ms),
            timeout_ms=s.landing_probe_timeout_ms,
        )

    async def _open_listing_from_home(self) -> None:
        s = self.settings
        try:
            await self.driver.goto(
                self.ctx, self.site.home_url, timeout_ms=s.fallback_navigation_timeout_ms
            )
            for matcher in self.site.listing_links:
                handles = await self.driver.query(self.ctx, matcher)
                if handles:
                    await self.driver.click(handles[0], timeout_ms=s.standard_click_timeout_ms)
                    await self.driver.sleep(self.ctx, s.page_settle_ms)
                    logger.info("Reached listing via home page link")
                    return
            logger.warning("No listing link on home page; continuing on current page")
        except Exception as e:  # noqa: BLE001
            raise NavigationError("could not navigate to the jobs page") from e

    async def _ensure_on_listing(self) -> None:
        url = await self.driver.current_url(self.ctx)
        if self.site.listing_path not in url:
            await self._open_listing()

    async def _authenticate(self) -> None:
        s = self.settings
        await self._fill_credentials()

        signal = await self._await_login(s.auth_timeout_ms)
        if signal is None:
            logger.warning("Automatic login not confirmed. Please log in manually...")
            signal = await self._await_login(s.auth_ceiling_ms)
        if signal is None:
            raise AuthenticationError("login timeout: no post-login signal observed")

        self.state.authenticated = True
        logger.info("Login detected (%s). Proceeding with applications", signal)

    async def _fill_credentials(self) -> bool:
        identifier = await self._first_visible(self.site.identifier_fields)
        secret = await self._first_visible(self.site.secret_fields)
        if identifier is None or secret is None:
            logger.info("No login form detected")
            return False
        creds = self.config.credentials
        try:
            await self.driver.fill(identifier, creds.identifier)
            await self.driver.fill(secret, creds.secret.get_secret_value())
        except Exception as e:  # noqa: BLE001
            logger.warning("Could not fill login form: %s", e)
            return False
        attempt = await self.actuator.perform(LogicalAction.SUBMIT_LOGIN)
        logger.info("Credentials submitted (%s)", attempt.outcome.value)
        return attempt.activated

    async def _await_login(self, timeout_ms: int) -> str | None:
        conditions: dict[str, Any] = {
            "url": self.driver.wait_for_url(
                self.ctx, self.site.listing_url_pattern, timeout_ms=timeout_ms
            )
        }
        conditions |= self._wait_any("post_login", self.site.post_login_controls, timeout_ms)
        conditions |= self._wait_any("item_list", self.site.item_list_signals, timeout_ms)
        return await race(conditions, timeout_ms=timeout_ms)

    def _wait_any(self, label: str, matchers: MatcherSet, timeout_ms: int) -> dict[str, Any]:
        return {
            f"{label}:{m}": self.driver.wait_for_element(self.ctx, m, timeout_ms=timeout_ms)
            for m in matchers
        }

    # ---------------- listing ----------------

    async def _list_items(self) -> list[Item]:
        page = self.state.current_page_index
        self.state.pages_visited += 1
        logger.info("Processing page %d...", page)

        await self._open_primary_view()

        handles = await self._enumerate(self.site.item_selectors)
        if not handles:
            logger.info("No item cards found. Trying alternative selectors...")
            handles = await self._enumerate(self.site.alt_item_selectors)
        logger.info("Found %d item(s) on page %d", len(handles), page)
        return [Item(handle=h, page_index=page, position=i) for i, h in enumerate(handles, 1)]

    async def _open_primary_view(self) -> None:
        """Open the site's single global detail panel, once per run."""
        if self.state.primary_view.is_set:
            return
        await self.overlays.dismiss_banners()
        attempt = await self.actuator.perform(LogicalAction.OPEN_DETAILS)
        if attempt.outcome is AttemptOutcome.NOT_FOUND:
            return
        self.state.primary_view.set()
        logger.info("Opened primary detail view (%s)", attempt.outcome.value)
        await self.driver.sleep(self.ctx, self.settings.settle_ms)

    async def _enumerate(self, matchers: MatcherSet) -> list[Any]:
        for matcher in matchers:
            try:
                handles = await self.driver.query(self.ctx, matcher)
            except Exception as e:  # noqa: BLE001
                logger.debug("item query %s failed: %s", matcher, e)
                continue
            if handles:
                return handles
        return []

    async def _first_visible(self, matchers: MatcherSet) -> Any:
        for matcher in matchers:
            try:
                for handle in await self.driver.query(self.ctx, matcher):
                    if await self.driver.is_visible(handle):
                        return handle
            except Exception as e:  # noqa: BLE001
                logger.debug("query %s failed: %s", matcher, e)
        return None

    # ---------------- per item ----------------

    async def _process_items(self, items: list[Item]) -> None:
        for item in items:
            if self.ledger.has(item.key):
                logger.debug("Item %s already recorded; skipping", item.key)
                continue
            outcome = await self._process_item(item)
            self._record(outcome)
            if outcome.succeeded:
                self.state.consecutive_empty_pages = 0
            try:
                await self.driver.sleep(self.ctx, self.config.settings.per_item_delay_ms)
            except Exception as e:  # noqa: BLE001
                logger.warning("Per-item delay interrupted: %s", e)

    async def _process_item(self, item: Item) -> ItemAttemptOutcome:
        """Never raises: every path returns exactly one outcome."""
        try:
            await self._describe(item)
            logger.info("Applying to: %s at %s", item.title, item.organization)

            opened = await self.actuator.perform(LogicalAction.OPEN_DETAILS, scope=item.handle)
            if opened.activated:
                await self.driver.sleep(self.ctx, self.settings.settle_ms)

            attempt = await self._apply(item)
            if not attempt.activated:
                reason = (
                    NO_APPLY_CONTROL
                    if attempt.outcome is AttemptOutcome.NOT_FOUND
                    else f"apply control {attempt.outcome.value.replace('_', ' ')}"
                )
                return await self._failure(item, reason)

            await self.driver.sleep(self.ctx, self.settings.apply_settle_ms)
            await self.overlays.resolve()
            await self.driver.sleep(self.ctx, self.settings.settle_ms)
            logger.info("Applied to: %s at %s", item.title, item.organization)
            return self._outcome(item, succeeded=True)
        except Exception as e:  # noqa: BLE001
            return await self._failure(item, str(e) or type(e).__name__)

    async def _describe(self, item: Item) -> None:
        try:
            await self.driver.scroll_into_view(item.handle)
        except Exception:  # noqa: BLE001
            pass
        item.title = await self._field_text(item, self.site.title_fields) or UNKNOWN_TITLE
        item.organization = (
            await self._field_text(item, self.site.organization_fields) or UNKNOWN_ORGANIZATION
        )

    async def _field_text(self, item: Item, matchers: MatcherSet) -> str | None:
        for matcher in matchers:
            try:
                handles = await self.driver.query(self.ctx, matcher, scope=item.handle)
                if handles:
                    text = await self.driver.text_content(handles[0])
                    if text and text.strip():
                        return text.strip()
            except Exception as e:  # noqa: BLE001
                logger.debug("field %s unreadable: %s", matcher, e)
        return None

    async def _apply(self, item: Item) -> ActionAttempt:
        """Document first (the detail panel lives outside the card), then the card."""
        attempt = await self.actuator.perform(LogicalAction.PRIMARY_APPLY)
        if attempt.activated:
            return attempt
        fallback = await self.actuator.perform(LogicalAction.PRIMARY_APPLY, scope=item.handle)
        if fallback.activated or attempt.outcome is AttemptOutcome.NOT_FOUND:
            return fallback
        return attempt

    async def _failure(self, item: Item, reason: str) -> ItemAttemptOutcome:
        logger.warning("Failed: %s at %s (%s)", item.title, item.organization, reason)
        artifact = await self._on_failure(item)
        return self._outcome(item, succeeded=False, error_reason=reason, artifact_path=artifact)

    def _outcome(self, item: Item, **kw: Any) -> ItemAttemptOutcome:
        return ItemAttemptOutcome(
            title=item.title,
            organization=item.organization,
            page_index=item.page_index,
            position=item.position,
            **kw,
        )

    def _record(self, outcome: ItemAttemptOutcome) -> None:
        self.ledger.append(outcome)
        logger.debug(
            "ledger: %d entries (%d applied, %d failed)",
            len(self.ledger),
            self.state.applied_count,
            self.state.failed_count,
        )

    async def _on_failure(self, item: Item) -> str | None:
        """Best-effort failure artifact (screenshot)."""
        if not self.artifacts_dir:
            return None
        png = self.artifacts_dir / f"fail-p{item.page_index:02d}-{item.position:02d}.png"
        try:
            await self.driver.screenshot(self.ctx, str(png), full_page=True)
            return str(png)
        except Exception:  # noqa: BLE001
            return None

    # ---------------- pagination ----------------

    async def _paginate(self) -> None:
        st = self.state
        if st.consecutive_empty_pages >= EMPTY_PAGE_LIMIT:
            logger.info("%d consecutive empty pages. Stopping", st.consecutive_empty_pages)
            self._transition(RunState.DONE)
            return
        if st.current_page_index >= st.max_pages:
            logger.info("Reached maximum page limit (%d). Stopping", st.max_pages)
            self._transition(RunState.DONE)
            return

        attempt = await self.actuator.perform(LogicalAction.GO_TO_NEXT_PAGE)
        if not attempt.activated:
            logger.info("No more pages found (%s)", attempt.outcome.value)
            self._transition(RunState.DONE)
            return

        # no deterministic "new page rendered" signal: the old list stays visible
        await self.driver.sleep(self.ctx, self.settings.page_settle_ms)
        st.advance_page()
        logger.info("Navigated to page %d", st.current_page_index)
        self._transition(RunState.LISTING)
