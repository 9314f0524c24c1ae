# autoapply/actions/sites/instahyre.py
"""
Site profile for the Instahyre candidate opportunities board.

Holds everything page-structural that is not a LogicalAction chain: URLs,
the post-login signals, credential fields, item enumeration selectors,
display-field selectors and dialog containers. Selector sets are ordered;
the first matcher that yields anything wins.

Adapt a copy of this profile per target site; chains live in actions/impl.py.
"""

from __future__ import annotations

from typing import Tuple

from pydantic import BaseModel, ConfigDict

from ...core.action import Matcher
from ..params import el, text

MatcherSet = Tuple[Matcher, ...]


class SiteProfile(BaseModel):
    """Static description of the target site's page structure."""

    model_config = ConfigDict(frozen=True)

    name: str
    listing_url: str
    home_url: str
    listing_url_pattern: str  # glob, as understood by the driver's wait_for_url
    listing_path: str  # substring of the listing page's URL

    identifier_fields: MatcherSet
    secret_fields: MatcherSet
    post_login_controls: MatcherSet
    item_list_signals: MatcherSet
    login_form_signals: MatcherSet

    item_selectors: MatcherSet
    alt_item_selectors: MatcherSet
    title_fields: MatcherSet
    organization_fields: MatcherSet

    dialog_containers: MatcherSet
    listing_links: MatcherSet


INSTAHYRE = SiteProfile(
    name="instahyre",
    listing_url="https://www.instahyre.com/candidate/opportunities/?matching=true",
    home_url="https://www.instahyre.com",
    listing_url_pattern="**/candidate/opportunities/**",
    listing_path="/candidate/opportunities",
    identifier_fields=(
        el("input", attrs={"type": "email"}),
        el("input", attrs={"name": "email"}),
        el(id="email"),
    ),
    secret_fields=(
        el("input", attrs={"type": "password"}),
        el("input", attrs={"name": "password"}),
        el(id="password"),
    ),
    post_login_controls=(el(id="interested-btn"),),
    item_list_signals=(
        el(None, "opportunity-card"),
        el(attrs={"data-testid": "job-card"}),
    ),
    login_form_signals=(
        el("input", attrs={"type": "email"}),
        el("input", attrs={"name": "email"}),
    ),
    item_selectors=(
        el(None, "job-card"),
        el(None, "opportunity-card"),
        el(attrs={"data-testid": "job-card"}),
        el(None, "job-item"),
    ),
    alt_item_selectors=(
        el(None, "card"),
        el(None, "job"),
        el(None, "opportunity"),
        el(contains={"class": "opportunity"}),
        el(contains={"class": "job"}),
    ),
    title_fields=(
        el("h3"),
        el("h4"),
        el(None, "job-title"),
        el(None, "title"),
        el(contains={"class": "title"}),
    ),
    organization_fields=(
        el(None, "company"),
        el(None, "company-name"),
        el(contains={"class": "company"}),
    ),
    dialog_containers=(
        el(None, "modal"),
        el(None, "popup"),
        el(None, "dialog"),
        el(attrs={"role": "dialog"}),
        el(None, "application-modal"),
        el(None, "apply-modal"),
    ),
    listing_links=(
        el("a", contains={"href": "opportunities"}),
        text("a", "Jobs"),
        text("a", "Opportunities"),
    ),
)
