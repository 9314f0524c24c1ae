"""
Shorthand builders for declaring matchers and candidate locators.
Why: chains in actions/impl.py and the site profile read as flat data
instead of nested model constructors.
- el(tag, *classes, id=?, attrs=?, contains=?, text=?, exclude=?) -> Matcher
- text(tag, words, exclude=?) -> Matcher (free-text match)
- cand(name, matcher, techniques=?) -> CandidateLocator
"""
# @file purpose: Builders for locator declarations.

from __future__ import annotations

from typing import Iterable

from ..core.action import ALL_TECHNIQUES, CandidateLocator, Matcher, Technique


def el(
    tag: str | None = None,
    *classes: str,
    id: str | None = None,
    attrs: dict[str, str] | None = None,
    contains: dict[str, str] | None = None,
    text: str | None = None,
    exclude: Iterable[str] = (),
) -> Matcher:
    return Matcher(
        tag=tag,
        id=id,
        classes=tuple(classes),
        exclude_classes=tuple(exclude),
        attrs=dict(attrs or {}),
        attr_contains=dict(contains or {}),
        text=text,
    )


def text(tag: str | None, words: str, *, exclude: Iterable[str] = ()) -> Matcher:
    return el(tag, text=words, exclude=exclude)


def cand(
    name: str, matcher: Matcher, techniques: tuple[Technique, ...] = ALL_TECHNIQUES
) -> CandidateLocator:
    return CandidateLocator(name=name, matcher=matcher, techniques=techniques)
