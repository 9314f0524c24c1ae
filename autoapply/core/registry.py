"""
Locator registry:
- maps each LogicalAction to its ordered CandidateLocator chain
- validates the chain on registration (non-empty, has a free-text fallback)
- chain order is the preference order; registration never reorders
"""
# @file purpose: Provide the candidate-locator registry and chain validation.

from __future__ import annotations

from typing import Callable, Dict, Iterable, Sequence, Tuple

from .action import CandidateLocator, LogicalAction
from .errors import LocatorChainError

Chain = Tuple[CandidateLocator, ...]

# Global registry: LogicalAction -> ordered candidates
_REGISTRY: Dict[LogicalAction, Chain] = {}


def validate_chain(action: LogicalAction, candidates: Iterable[CandidateLocator]) -> Chain:
    chain = tuple(candidates)
    if not chain:
        raise LocatorChainError(f"empty candidate chain for {action.value}")
    if not any(c.matcher.is_free_text for c in chain):
        raise LocatorChainError(f"candidate chain for {action.value} has no free-text fallback")
    names = [c.name for c in chain]
    if len(set(names)) != len(names):
        raise LocatorChainError(f"duplicate candidate names for {action.value}: {names}")
    return chain


def register(action: LogicalAction, candidates: Sequence[CandidateLocator]) -> Chain:
    """Register (or replace) the chain of an action. Returns the stored chain."""
    chain = validate_chain(action, candidates)
    _REGISTRY[action] = chain
    return chain


def locators(action: LogicalAction) -> Callable[[Callable[[], Sequence[CandidateLocator]]], Chain]:
    """
    Decorator form: the decorated builder returns the candidate list.
    Usage:
        @locators(LogicalAction.PRIMARY_APPLY)
        def primary_apply(): return [...]
    """

    def deco(build: Callable[[], Sequence[CandidateLocator]]) -> Chain:
        return register(action, build())

    return deco


def get_chain(action: LogicalAction) -> Chain:
    try:
        return _REGISTRY[action]
    except KeyError as e:
        raise KeyError(f"No locator chain registered for: {action.value}") from e


def list_chains() -> Dict[LogicalAction, Chain]:
    """Shallow copy for display and debugging."""
    return dict(_REGISTRY)


def _reset_registry_for_tests() -> None:
    _REGISTRY.clear()
