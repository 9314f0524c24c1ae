"""
Resilient Actuator: `perform(action, scope) -> ActionAttempt`.

Resolves a target through the LocatorChain, then escalates through the
candidate's techniques (standard -> forced -> programmatic). The first
technique that completes wins; a failed technique is never retried. Technique
errors are logged and swallowed here; callers only see the ActionAttempt.
"""

from __future__ import annotations

import logging
from typing import Any

from ..core.action import CandidateLocator, LogicalAction, Technique
from ..core.errors import ActionExecutionError
from ..core.result import ActionAttempt, AttemptOutcome
from ..io.driver import BrowserDriver
from .locator import LocatorChain, Resolution

logger = logging.getLogger(__name__)


class Actuator:
    def __init__(
        self,
        driver: BrowserDriver,
        ctx: Any,
        chain: LocatorChain,
        *,
        standard_timeout_ms: int = 2_000,
        forced_timeout_ms: int = 1_000,
        settle_ms: int = 500,
    ) -> None:
        self.driver = driver
        self.ctx = ctx
        self.chain = chain
        self.standard_timeout_ms = standard_timeout_ms
        self.forced_timeout_ms = forced_timeout_ms
        self.settle_ms = settle_ms

    async def perform(self, action: LogicalAction, scope: Any = None) -> ActionAttempt:
        res = await self.chain.resolve(action, scope)
        return await self.activate(action, res)

    async def activate(self, action: LogicalAction, res: Resolution) -> ActionAttempt:
        if res.outcome is AttemptOutcome.NOT_FOUND:
            return ActionAttempt.not_found(action)
        if not res.found:
            return ActionAttempt.not_actionable(action, res.candidate)

        cand = res.candidate
        assert cand is not None
        tried = 0
        for technique in cand.techniques:
            tried += 1
            try:
                await self._apply(action, cand, technique, res.element)
            except ActionExecutionError as e:
                logger.debug("%s", e)
                continue
            logger.debug("[%s] activated %r via %s", action.value, cand.name, technique.value)
            return ActionAttempt(
                action=action,
                outcome=AttemptOutcome.ACTIVATED,
                candidate=cand,
                techniques_tried=tried,
                technique=technique,
            )

        logger.info("[%s] all techniques failed for %r", action.value, cand.name)
        return ActionAttempt(
            action=action,
            outcome=AttemptOutcome.ALL_TECHNIQUES_FAILED,
            candidate=cand,
            techniques_tried=tried,
        )

    async def _apply(
        self, action: LogicalAction, cand: CandidateLocator, technique: Technique, element: Any
    ) -> None:
        try:
            if technique is Technique.STANDARD:
                await self.driver.scroll_into_view(element)
                await self.driver.click(element, timeout_ms=self.standard_timeout_ms)
            elif technique is Technique.FORCED:
                await self.driver.click(element, timeout_ms=self.forced_timeout_ms, force=True)
            else:
                await self.driver.invoke(element)
                # no completion signal after a synthetic click
                await self.driver.sleep(self.ctx, self.settle_ms)
        except Exception as e:  # noqa: BLE001
            raise ActionExecutionError(
                action=action.value,
                message="activation technique failed",
                technique=technique.value,
                selector=cand.matcher.to_selector(),
                details={"cause": repr(e)},
                cause=e,
            ) from e
