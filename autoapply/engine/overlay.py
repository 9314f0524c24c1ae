"""
Modal/Overlay Handler.

- dismiss_banners(): consent/onboarding banners, at session start and before
  the one-shot detail view.
- resolve(scope=None): after an apply activation. If a dialog-like container
  is visible, try in order: apply/submit inside it, the optional secondary
  "bulk apply" control (raced against a short timeout), a close control, and
  finally an Escape keystroke. Each step is best-effort; resolve() never raises.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from ..actions.sites.instahyre import SiteProfile
from ..core.action import LogicalAction
from ..io.driver import BrowserDriver, race
from .actuator import Actuator

logger = logging.getLogger(__name__)


class OverlayHandler:
    def __init__(
        self,
        driver: BrowserDriver,
        ctx: Any,
        actuator: Actuator,
        site: SiteProfile,
        *,
        secondary_timeout_ms: int = 2_500,
        settle_ms: int = 500,
        max_consent_dismissals: int = 6,
        poll_ms: int = 250,
    ) -> None:
        self.driver = driver
        self.ctx = ctx
        self.actuator = actuator
        self.site = site
        self.secondary_timeout_ms = secondary_timeout_ms
        self.settle_ms = settle_ms
        self.max_consent_dismissals = max_consent_dismissals
        self.poll_ms = poll_ms

    async def dismiss_banners(self) -> int:
        """Click consent/onboarding controls until none is left. Returns the count."""
        dismissed = 0
        while dismissed < self.max_consent_dismissals:
            ok = await self._best_effort(
                "accept consent", lambda: self._activated(LogicalAction.ACCEPT_CONSENT)
            )
            if not ok:
                break
            dismissed += 1
            await self.driver.sleep(self.ctx, self.settle_ms)
        if dismissed:
            logger.info("Dismissed %d banner(s)", dismissed)
        return dismissed

    async def resolve(self, scope: Any = None) -> None:
        container = await self._best_effort("find dialog", lambda: self._find_container(scope))
        if container is None:
            return
        logger.info("Dialog detected, handling...")

        if await self._best_effort(
            "apply in dialog", lambda: self._activated(LogicalAction.PRIMARY_APPLY, container)
        ):
            logger.info("Clicked apply inside dialog")

        if await self._best_effort("secondary apply", self._secondary_apply):
            logger.info("Clicked secondary apply")

        if not await self._still_open(container):
            return
        if await self._best_effort(
            "close dialog", lambda: self._activated(LogicalAction.DISMISS_OVERLAY, container)
        ):
            logger.info("Closed dialog")
            return

        if await self._still_open(container):
            await self._best_effort("escape", lambda: self.driver.press_key(self.ctx, "Escape"))

    # ---------------- steps ----------------

    async def _find_container(self, scope: Any) -> Any:
        containers = await self._visible_containers(scope)
        return containers[0] if containers else None

    async def _visible_containers(self, scope: Any) -> list[Any]:
        found = []
        for matcher in self.site.dialog_containers:
            for handle in await self.driver.query(self.ctx, matcher, scope=scope):
                if await self.driver.is_visible(handle):
                    found.append(handle)
        return found

    async def _secondary_apply(self) -> bool:
        """
        The secondary control only shows up in some flows, after the primary
        apply. Its absence within the short window is not an error.
        """
        # TODO: confirm whether the secondary control applies to the same item
        # or to a batch of similar postings; it is clicked either way.
        winner = await race(
            {"secondary_apply": self._secondary_container()},
            timeout_ms=self.secondary_timeout_ms,
        )
        if winner is None:
            logger.debug("No secondary apply control appeared")
            return False
        for container in await self._visible_containers(None):
            if await self._activated(LogicalAction.BULK_APPLY, container):
                await self.driver.sleep(self.ctx, self.settle_ms)
                return True
        return False

    async def _secondary_container(self) -> Any:
        """Poll until a visible dialog holds an actionable secondary apply control."""
        while True:
            for container in await self._visible_containers(None):
                res = await self.actuator.chain.resolve(LogicalAction.BULK_APPLY, container)
                if res.found:
                    return container
            await self.driver.sleep(self.ctx, self.poll_ms)

    async def _activated(self, action: LogicalAction, scope: Any = None) -> bool:
        attempt = await self.actuator.perform(action, scope)
        return attempt.activated

    async def _still_open(self, container: Any) -> bool:
        try:
            return await self.driver.is_visible(container)
        except Exception:  # noqa: BLE001
            return False

    async def _best_effort(self, step: str, fn: Callable[[], Awaitable[Any]]) -> Any:
        try:
            return await fn()
        except Exception as e:  # noqa: BLE001
            logger.debug("Overlay step %r failed: %s", step, e)
            return None
