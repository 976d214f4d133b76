# SPDX-License-Identifier: Apache-2.0
"""Narrow a set of campaign ids by intersecting optional filters."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from ohmage.core.roles import PrivacyState, Role, RunningState
from ohmage.services.fact_provider import FactProvider

logger = logging.getLogger("ohmage.selection")


class CampaignSelectionService:
    def __init__(self, facts: FactProvider):
        self.facts = facts

    def select_campaigns(
        self,
        username: str,
        campaign_ids: Iterable[str] | None = None,
        class_ids: Iterable[str] | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        privacy_state: PrivacyState | None = None,
        running_state: RunningState | None = None,
        role: Role | None = None,
    ) -> set[str]:
        """
        Campaign ids matching every supplied filter.

        The base set is campaign_ids when given (an empty collection stays empty),
        otherwise every campaign the user belongs to. Each other argument that is not
        None intersects the running result with the campaigns it matches:

        - class_ids: campaigns associated with each listed class (one intersection per class)
        - start_date / end_date: creation timestamp on or after / on or before
        - privacy_state / running_state: campaigns currently in that state
        - role: campaigns where the user holds that role

        Filters commute and are idempotent. The result is unordered.
        """
        if campaign_ids is None:
            selected = set(self.facts.all_campaigns_for_user(username))
        else:
            selected = set(campaign_ids)

        if class_ids is not None:
            for class_id in class_ids:
                selected &= self.facts.campaigns_associated_with_class(class_id)

        if start_date is not None:
            selected &= self.facts.campaigns_on_or_after(start_date)

        if end_date is not None:
            selected &= self.facts.campaigns_on_or_before(end_date)

        if privacy_state is not None:
            selected &= self.facts.campaigns_with_privacy_state(privacy_state)

        if running_state is not None:
            selected &= self.facts.campaigns_with_running_state(running_state)

        if role is not None:
            selected &= self.facts.campaigns_where_user_has_role(username, role)

        logger.debug("Selected %d campaigns for %s", len(selected), username)
        return selected

    def users_in_campaigns(self, campaign_ids: Iterable[str]) -> set[str]:
        """Distinct usernames across all of the campaigns."""
        usernames: set[str] = set()
        for campaign_id in campaign_ids:
            usernames |= self.facts.users_in_campaign(campaign_id)
        return usernames
