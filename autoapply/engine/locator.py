"""
Locator Strategy Chain.

Walks a LogicalAction's candidates in declaration order and returns the first
element that is present, visible and enabled. A candidate that only matches
non-actionable elements is stabilized once (scroll into view + settle delay),
re-checked, and otherwise skipped. Query errors for a single candidate count
as "no match" and never escape this layer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..core import registry
from ..core.action import CandidateLocator, LogicalAction
from ..core.result import AttemptOutcome
from ..io.driver import BrowserDriver

logger = logging.getLogger(__name__)


@dataclass
class Resolution:
    """Where the chain landed. `outcome` is None when an actionable element was found."""

    outcome: AttemptOutcome | None
    element: Any = None
    candidate: CandidateLocator | None = None
    index: int | None = None

    @property
    def found(self) -> bool:
        return self.element is not None


class LocatorChain:
    def __init__(self, driver: BrowserDriver, ctx: Any, *, settle_ms: int = 500) -> None:
        self.driver = driver
        self.ctx = ctx
        self.settle_ms = settle_ms

    async def resolve(self, action: LogicalAction, scope: Any = None) -> Resolution:
        return await self.resolve_in(registry.get_chain(action), scope, label=action.value)

    async def resolve_in(
        self, chain: tuple[CandidateLocator, ...], scope: Any = None, *, label: str = "-"
    ) -> Resolution:
        blocked: Resolution | None = None

        for i, cand in enumerate(chain):
            try:
                handles = await self.driver.query(self.ctx, cand.matcher, scope=scope)
            except Exception as e:  # noqa: BLE001
                logger.debug("[%s] candidate %r query failed: %s", label, cand.name, e)
                continue
            if not handles:
                continue

            element = await self._first_actionable(handles)
            if element is None:
                element = await self._stabilize(handles[0])
            if element is not None:
                logger.debug("[%s] resolved via candidate #%d %r", label, i + 1, cand.name)
                return Resolution(None, element, cand, i)

            logger.debug("[%s] candidate %r present but not actionable", label, cand.name)
            if blocked is None:
                blocked = Resolution(AttemptOutcome.FOUND_BUT_NOT_ACTIONABLE, None, cand, i)

        if blocked is not None:
            return blocked
        return Resolution(AttemptOutcome.NOT_FOUND)

    async def _first_actionable(self, handles: list[Any]) -> Any:
        for h in handles:
            if await self._actionable(h):
                return h
        return None

    async def _stabilize(self, handle: Any) -> Any:
        """Scroll the first match into view, let it settle, check once more."""
        try:
            await self.driver.scroll_into_view(handle)
        except Exception as e:  # noqa: BLE001
            logger.debug("scroll into view failed: %s", e)
        await self.driver.sleep(self.ctx, self.settle_ms)
        return handle if await self._actionable(handle) else None

    async def _actionable(self, handle: Any) -> bool:
        try:
            return await self.driver.is_visible(handle) and await self.driver.is_enabled(handle)
        except Exception:  # noqa: BLE001
            # detached between query and check
            return False
