# SPDX-License-Identifier: Apache-2.0
"""
Role and state facts consumed by the authorization and campaign selection engines.

FactProvider is the query interface; SqlFactProvider answers it from the relational store.
Store failures surface as DataAccessError and are never retried here.
"""
from __future__ import annotations

import functools
import logging
from datetime import datetime
from typing import Protocol

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ohmage.core.exceptions import DataAccessError
from ohmage.core.roles import ClassRole, PrivacyState, Role, RunningState
from ohmage.models import Campaign, CampaignClass, SurveyResponse, User, UserCampaignRole, UserClass, UserPersonal

logger = logging.getLogger("ohmage.facts")


class FactProvider(Protocol):
    def campaign_exists(self, campaign_id: str) -> bool: ...

    def user_exists(self, username: str) -> bool: ...

    def user_is_admin(self, username: str) -> bool: ...

    def user_can_create_campaigns(self, username: str) -> bool: ...

    def user_has_personal_info(self, username: str) -> bool: ...

    def roles_of(self, username: str, campaign_id: str) -> set[Role]: ...

    def campaign_privacy_state(self, campaign_id: str) -> PrivacyState | None: ...

    def campaign_running_state(self, campaign_id: str) -> RunningState | None: ...

    def response_count_for_campaign(self, campaign_id: str) -> int: ...

    def campaigns_associated_with_class(self, class_id: str) -> set[str]: ...

    def classes_associated_with_campaign(self, campaign_id: str) -> set[str]: ...

    def campaigns_on_or_after(self, when: datetime) -> set[str]: ...

    def campaigns_on_or_before(self, when: datetime) -> set[str]: ...

    def campaigns_with_privacy_state(self, state: PrivacyState) -> set[str]: ...

    def campaigns_with_running_state(self, state: RunningState) -> set[str]: ...

    def campaigns_where_user_has_role(self, username: str, role: Role) -> set[str]: ...

    def all_campaigns_for_user(self, username: str) -> set[str]: ...

    def classes_where_user_privileged(self, username: str) -> set[str]: ...

    def users_in_campaign(self, campaign_id: str) -> set[str]: ...


def _data_access(fn):
    """Translate driver errors into DataAccessError, keeping the cause chained."""

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.error("Fact query %s failed: %s", fn.__name__, e)
            raise DataAccessError() from e

    return wrapper


class SqlFactProvider:
    """FactProvider over the SQLModel tables. One instance per request session."""

    def __init__(self, session: Session):
        self.session = session

    @_data_access
    def campaign_exists(self, campaign_id: str) -> bool:
        return self.session.get(Campaign, campaign_id) is not None

    @_data_access
    def user_exists(self, username: str) -> bool:
        return self.session.get(User, username) is not None

    @_data_access
    def user_is_admin(self, username: str) -> bool:
        user = self.session.get(User, username)
        return bool(user and user.admin)

    @_data_access
    def user_can_create_campaigns(self, username: str) -> bool:
        user = self.session.get(User, username)
        return bool(user and user.campaign_creation_privilege)

    @_data_access
    def user_has_personal_info(self, username: str) -> bool:
        stmt = select(UserPersonal.id).where(UserPersonal.username == username)
        return self.session.exec(stmt).first() is not None

    @_data_access
    def roles_of(self, username: str, campaign_id: str) -> set[Role]:
        stmt = select(UserCampaignRole.role).where(
            UserCampaignRole.username == username,
            UserCampaignRole.campaign_id == campaign_id,
        )
        return {Role(r) for r in self.session.exec(stmt).all()}

    @_data_access
    def campaign_privacy_state(self, campaign_id: str) -> PrivacyState | None:
        campaign = self.session.get(Campaign, campaign_id)
        return PrivacyState(campaign.privacy_state) if campaign else None

    @_data_access
    def campaign_running_state(self, campaign_id: str) -> RunningState | None:
        campaign = self.session.get(Campaign, campaign_id)
        return RunningState(campaign.running_state) if campaign else None

    @_data_access
    def response_count_for_campaign(self, campaign_id: str) -> int:
        stmt = select(func.count(SurveyResponse.id)).where(SurveyResponse.campaign_id == campaign_id)
        return int(self.session.exec(stmt).one())

    @_data_access
    def campaigns_associated_with_class(self, class_id: str) -> set[str]:
        stmt = select(CampaignClass.campaign_id).where(CampaignClass.class_id == class_id)
        return set(self.session.exec(stmt).all())

    @_data_access
    def classes_associated_with_campaign(self, campaign_id: str) -> set[str]:
        stmt = select(CampaignClass.class_id).where(CampaignClass.campaign_id == campaign_id)
        return set(self.session.exec(stmt).all())

    @_data_access
    def campaigns_on_or_after(self, when: datetime) -> set[str]:
        stmt = select(Campaign.id).where(Campaign.creation_timestamp >= when)
        return set(self.session.exec(stmt).all())

    @_data_access
    def campaigns_on_or_before(self, when: datetime) -> set[str]:
        stmt = select(Campaign.id).where(Campaign.creation_timestamp <= when)
        return set(self.session.exec(stmt).all())

    @_data_access
    def campaigns_with_privacy_state(self, state: PrivacyState) -> set[str]:
        stmt = select(Campaign.id).where(Campaign.privacy_state == state)
        return set(self.session.exec(stmt).all())

    @_data_access
    def campaigns_with_running_state(self, state: RunningState) -> set[str]:
        stmt = select(Campaign.id).where(Campaign.running_state == state)
        return set(self.session.exec(stmt).all())

    @_data_access
    def campaigns_where_user_has_role(self, username: str, role: Role) -> set[str]:
        stmt = select(UserCampaignRole.campaign_id).where(
            UserCampaignRole.username == username,
            UserCampaignRole.role == role,
        )
        return set(self.session.exec(stmt).all())

    @_data_access
    def all_campaigns_for_user(self, username: str) -> set[str]:
        stmt = select(UserCampaignRole.campaign_id).where(UserCampaignRole.username == username)
        return set(self.session.exec(stmt).all())

    @_data_access
    def classes_where_user_privileged(self, username: str) -> set[str]:
        stmt = select(UserClass.class_id).where(
            UserClass.username == username,
            UserClass.role == ClassRole.PRIVILEGED,
        )
        return set(self.session.exec(stmt).all())

    @_data_access
    def users_in_campaign(self, campaign_id: str) -> set[str]:
        stmt = select(UserCampaignRole.username).where(UserCampaignRole.campaign_id == campaign_id)
        return set(self.session.exec(stmt).all())
