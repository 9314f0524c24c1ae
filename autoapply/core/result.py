"""
Structured result of one `perform()` call, reported up to the runner/overlay layer.
"""
# @file purpose: Define ActionAttempt model for actuator outputs.

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from .action import CandidateLocator, LogicalAction, Technique


class AttemptOutcome(str, Enum):
    ACTIVATED = "activated"
    NOT_FOUND = "not_found"
    FOUND_BUT_NOT_ACTIONABLE = "found_but_not_actionable"
    ALL_TECHNIQUES_FAILED = "all_techniques_failed"


class ActionAttempt(BaseModel):
    """
    Result of trying a LogicalAction once:
    - outcome: aggregated result; technique/candidate errors never surface past it
    - candidate: the candidate whose element was resolved (None when not found)
    - techniques_tried: how many techniques ran before success or exhaustion
    - technique: the technique that activated the element, if any
    """

    action: LogicalAction
    outcome: AttemptOutcome
    candidate: Optional[CandidateLocator] = None
    techniques_tried: int = 0
    technique: Optional[Technique] = None

    @property
    def activated(self) -> bool:
        return self.outcome is AttemptOutcome.ACTIVATED

    @classmethod
    def not_found(cls, action: LogicalAction) -> "ActionAttempt":
        return cls(action=action, outcome=AttemptOutcome.NOT_FOUND)

    @classmethod
    def not_actionable(
        cls, action: LogicalAction, candidate: Optional[CandidateLocator]
    ) -> "ActionAttempt":
        return cls(
            action=action, outcome=AttemptOutcome.FOUND_BUT_NOT_ACTIONABLE, candidate=candidate
        )
