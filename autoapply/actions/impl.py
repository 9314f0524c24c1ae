"""
Candidate chains for every LogicalAction, registered at import time:
- open_details / primary_apply / bulk_apply / dismiss_overlay / go_to_next_page
- accept_consent / submit_login

Order is the preference order: exact markup of the known control first,
broader class matches next, free-text matches last. Reordering changes which
control wins when several are on the page.

Import this module once (CLI and tests do) to populate the registry.
"""

# @file purpose: Declare and register candidate locator chains.
from __future__ import annotations

from ..core.action import LogicalAction, Technique
from ..core.registry import locators

from .params import cand, el, text

_CLICK_ONLY = (Technique.STANDARD, Technique.FORCED)


@locators(LogicalAction.OPEN_DETAILS)
def open_details():
    return [
        cand("interested-btn", el(id="interested-btn")),
        cand("interested-class", el("button", "button-interested", "btn", "btn-success")),
        cand("open-apply-modal", el("button", attrs={"ng-click": "openApplyModal(opp)"})),
        cand("view-button", text("button", "View")),
        cand("view-link", text("a", "View")),
        cand("see-more", text("button", "See more")),
    ]


@locators(LogicalAction.PRIMARY_APPLY)
def primary_apply():
    return [
        cand("new-btn-primary", el("button", "btn", "btn-lg", "btn-primary", "new-btn")),
        cand("button-apply-class", el("button", "apply")),
        cand("apply-btn", el(None, "apply-btn")),
        cand("btn-apply", el(None, "btn-apply")),
        cand("apply-text", text("button", "Apply", exclude=("btn-success",))),
        cand("interested-text", text("button", "Interested")),
        cand("submit-text", text("button", "Submit")),
    ]


@locators(LogicalAction.BULK_APPLY)
def bulk_apply():
    return [
        cand(
            "apply-bulk-success",
            el("button", "btn", "btn-lg", "btn-success", attrs={"ng-click": "applyBulk()"}),
        ),
        cand("apply-bulk", el("button", attrs={"ng-click": "applyBulk()"})),
        cand("btn-lg-success", el("button", "btn", "btn-lg", "btn-success")),
        cand("apply-all-text", text("button", "Apply All")),
        cand("apply-secondary-text", text("button", "Apply", exclude=("btn-primary",))),
    ]


@locators(LogicalAction.DISMISS_OVERLAY)
def dismiss_overlay():
    return [
        cand("aria-close", el(attrs={"aria-label": "Close"}), _CLICK_ONLY),
        cand("btn-close", el(None, "btn-close"), _CLICK_ONLY),
        cand("modal-close", el(None, "modal-close"), _CLICK_ONLY),
        cand("close", el(None, "close"), _CLICK_ONLY),
        cand("close-text", text("button", "Close"), _CLICK_ONLY),
    ]


@locators(LogicalAction.GO_TO_NEXT_PAGE)
def go_to_next_page():
    return [
        cand("pagination-next", el(None, "pagination-next")),
        cand("aria-next", el(attrs={"aria-label": "Next"})),
        cand("page-next", el(None, "page-next")),
        cand("next", el(None, "next")),
        cand("next-button-text", text("button", "Next")),
        cand("next-link-text", text("a", "Next")),
    ]


@locators(LogicalAction.ACCEPT_CONSENT)
def accept_consent():
    return [
        cand("onetrust-accept", el(id="onetrust-accept-btn-handler"), _CLICK_ONLY),
        cand("cookie-consent-accept", el(None, "cookie-consent-accept"), _CLICK_ONLY),
        cand("onetrust-refuse", el(None, "ot-pc-refuse-all-handler"), _CLICK_ONLY),
        cand("got-it-text", text("button", "Got it"), _CLICK_ONLY),
        cand("accept-text", text("button", "Accept"), _CLICK_ONLY),
        cand("agree-text", text("button", "I agree"), _CLICK_ONLY),
    ]


@locators(LogicalAction.SUBMIT_LOGIN)
def submit_login():
    return [
        cand("submit-type", el("button", attrs={"type": "submit"})),
        cand("login-btn", el(None, "login-btn")),
        cand("login-text", text("button", "Login")),
        cand("sign-in-text", text("button", "Sign In")),
    ]
