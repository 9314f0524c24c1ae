"""
Data contracts of the locator layer.
- LogicalAction: named interactive steps, fixed at build time
- Technique: activation techniques, in escalation order
- Matcher: declarative predicate over one element (pure check + Playwright selector)
- CandidateLocator: one way to find and activate a LogicalAction's target
"""
# @file purpose: Define locator data contracts.

from __future__ import annotations

from enum import Enum
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field


class LogicalAction(str, Enum):
    OPEN_DETAILS = "open_details"
    PRIMARY_APPLY = "primary_apply"
    BULK_APPLY = "bulk_apply"
    DISMISS_OVERLAY = "dismiss_overlay"
    GO_TO_NEXT_PAGE = "go_to_next_page"
    ACCEPT_CONSENT = "accept_consent"
    SUBMIT_LOGIN = "submit_login"


class Technique(str, Enum):
    """Escalation order: real interaction first, programmatic last."""

    STANDARD = "standard"
    FORCED = "forced"
    PROGRAMMATIC = "programmatic"


ALL_TECHNIQUES: tuple[Technique, ...] = (
    Technique.STANDARD,
    Technique.FORCED,
    Technique.PROGRAMMATIC,
)


class Matcher(BaseModel):
    """
    A predicate over one element of the live UI tree.

    Every set field must hold for a match:
    - tag: element tag name
    - id: exact id attribute
    - classes: all listed classes present
    - exclude_classes: none of the listed classes present
    - attrs: exact attribute values
    - attr_contains: attribute values containing a substring
    - text: case-insensitive substring of the element's visible text

    The same matcher is evaluated in pure Python by `matches()` and compiled
    to a Playwright selector by `to_selector()`.
    """

    model_config = ConfigDict(frozen=True)

    tag: str | None = None
    id: str | None = None
    classes: tuple[str, ...] = ()
    exclude_classes: tuple[str, ...] = ()
    attrs: dict[str, str] = Field(default_factory=dict)
    attr_contains: dict[str, str] = Field(default_factory=dict)
    text: str | None = None

    @property
    def is_free_text(self) -> bool:
        return self.text is not None

    def matches(self, tag: str, attrs: Mapping[str, str], text: str | None = None) -> bool:
        if self.tag and tag.lower() != self.tag.lower():
            return False
        if self.id is not None and attrs.get("id") != self.id:
            return False
        own = set((attrs.get("class") or "").split())
        if any(c not in own for c in self.classes):
            return False
        if any(c in own for c in self.exclude_classes):
            return False
        for k, v in self.attrs.items():
            if attrs.get(k) != v:
                return False
        for k, v in self.attr_contains.items():
            if v not in (attrs.get(k) or ""):
                return False
        if self.text is not None:
            if self.text.lower() not in (text or "").lower():
                return False
        return True

    def to_selector(self) -> str:
        sel = self.tag or ""
        if self.id:
            sel += f"#{self.id}"
        sel += "".join(f".{c}" for c in self.classes)
        for k, v in self.attrs.items():
            sel += f'[{k}="{_escape(v)}"]'
        for k, v in self.attr_contains.items():
            sel += f'[{k}*="{_escape(v)}"]'
        if self.text is not None:
            sel += f':has-text("{_escape(self.text)}")'
        sel += "".join(f":not(.{c})" for c in self.exclude_classes)
        return sel or "*"

    def __str__(self) -> str:
        return self.to_selector()


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


class CandidateLocator(BaseModel):
    """One ranked way to locate a LogicalAction's target."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Short label used in logs.")
    matcher: Matcher
    techniques: tuple[Technique, ...] = Field(default=ALL_TECHNIQUES, min_length=1)
