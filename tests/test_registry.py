"""Locator registry: chain validation and the built-in chains."""

import pytest

from autoapply.actions.params import cand, el, text
from autoapply.core import registry
from autoapply.core.action import LogicalAction
from autoapply.core.errors import LocatorChainError


def test_every_action_has_a_valid_chain() -> None:
    chains = registry.list_chains()
    assert set(chains) == set(LogicalAction)
    for action, chain in chains.items():
        assert registry.validate_chain(action, chain) == chain


def test_empty_chain_rejected() -> None:
    with pytest.raises(LocatorChainError, match="empty"):
        registry.validate_chain(LogicalAction.PRIMARY_APPLY, [])


def test_chain_without_free_text_fallback_rejected() -> None:
    with pytest.raises(LocatorChainError, match="free-text"):
        registry.validate_chain(LogicalAction.PRIMARY_APPLY, [cand("cls", el("button", "apply"))])


def test_duplicate_candidate_names_rejected() -> None:
    with pytest.raises(LocatorChainError, match="duplicate"):
        registry.validate_chain(
            LogicalAction.PRIMARY_APPLY,
            [cand("x", el("button", "apply")), cand("x", text("button", "Apply"))],
        )


def test_register_keeps_declaration_order() -> None:
    saved = registry.list_chains()
    try:
        chain = registry.register(
            LogicalAction.BULK_APPLY,
            [cand("b", el(None, "b")), cand("a", el(None, "a")), cand("t", text(None, "Apply"))],
        )
        assert [c.name for c in registry.get_chain(LogicalAction.BULK_APPLY)] == ["b", "a", "t"]
        assert chain == registry.get_chain(LogicalAction.BULK_APPLY)
    finally:
        registry._reset_registry_for_tests()
        for action, original in saved.items():
            registry.register(action, original)


def test_unregistered_action_raises_key_error() -> None:
    saved = registry.list_chains()
    try:
        registry._reset_registry_for_tests()
        with pytest.raises(KeyError):
            registry.get_chain(LogicalAction.OPEN_DETAILS)
    finally:
        for action, original in saved.items():
            registry.register(action, original)
