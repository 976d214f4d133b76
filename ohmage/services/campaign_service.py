# SPDX-License-Identifier: Apache-2.0
"""Campaign reads and writes that sit behind an authorization check."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ohmage.core.exceptions import DataAccessError
from ohmage.core.roles import Role
from ohmage.models import Campaign, CampaignClass, PromptResponse, SurveyResponse, UserCampaignRole, UserPersonal
from ohmage.services.authorization_service import AuthorizationService

logger = logging.getLogger("ohmage.campaigns")


class CampaignService:
    def __init__(self, session: Session, authorization: AuthorizationService):
        self.session = session
        self.authorization = authorization

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DataAccessError() from e

    def update_user_roles(
        self,
        requester: str,
        campaign_id: str,
        add: Mapping[str, set[Role]] | None = None,
        remove: Mapping[str, set[Role]] | None = None,
    ) -> None:
        """Grant and revoke roles in one transaction, after checking every role touched."""
        add = add or {}
        remove = remove or {}
        self.authorization.check_campaign_existence(campaign_id)
        touched: set[Role] = set()
        for roles in list(add.values()) + list(remove.values()):
            touched |= roles
        self.authorization.verify_user_can_grant_or_revoke_roles(requester, campaign_id, touched)
        self.authorization.verify_users_exist(set(add) | set(remove))

        try:
            for username, roles in remove.items():
                for role in roles:
                    self.session.exec(
                        delete(UserCampaignRole).where(
                            UserCampaignRole.username == username,
                            UserCampaignRole.campaign_id == campaign_id,
                            UserCampaignRole.role == role,
                        )
                    )
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DataAccessError() from e
        for username, roles in add.items():
            existing = self.authorization.facts.roles_of(username, campaign_id)
            for role in roles - existing:
                self.session.add(UserCampaignRole(username=username, campaign_id=campaign_id, role=role))
        self._commit()
        logger.info("%s updated roles in %s", requester, campaign_id)

    def delete_campaign(self, requester: str, campaign_id: str) -> None:
        self.authorization.check_campaign_existence(campaign_id)
        self.authorization.verify_user_can_delete_campaign(requester, campaign_id)

        response_ids = select(SurveyResponse.id).where(SurveyResponse.campaign_id == campaign_id)
        try:
            self.session.exec(delete(PromptResponse).where(PromptResponse.survey_response_id.in_(response_ids)))
            self.session.exec(delete(SurveyResponse).where(SurveyResponse.campaign_id == campaign_id))
            self.session.exec(delete(UserCampaignRole).where(UserCampaignRole.campaign_id == campaign_id))
            self.session.exec(delete(CampaignClass).where(CampaignClass.campaign_id == campaign_id))
            self.session.exec(delete(Campaign).where(Campaign.id == campaign_id))
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DataAccessError() from e
        self._commit()
        logger.info("%s deleted campaign %s", requester, campaign_id)

    def campaign_information(self, requester: str, campaign_ids: Iterable[str], with_extras: bool = False) -> list[dict]:
        """
        Name, description, states, creation time and the requester's roles per campaign.
        With extras: members grouped by role and the associated classes, which require the
        read-users and read-classes rules to pass for every campaign.
        """
        campaign_ids = sorted(campaign_ids)
        if with_extras:
            self.authorization.verify_user_can_read_users_in_campaigns(requester, campaign_ids)
            self.authorization.verify_user_can_read_classes_associated_with_campaigns(requester, campaign_ids)

        facts = self.authorization.facts
        result = []
        for campaign_id in campaign_ids:
            campaign = self.session.get(Campaign, campaign_id)
            if campaign is None:
                continue
            info = {
                "id": campaign.id,
                "name": campaign.name,
                "description": campaign.description,
                "version": campaign.version,
                "privacy_state": campaign.privacy_state.value,
                "running_state": campaign.running_state.value,
                "creation_timestamp": campaign.creation_timestamp.isoformat(),
                "user_roles": sorted(r.value for r in facts.roles_of(requester, campaign_id)),
            }
            if with_extras:
                members: dict[str, list[str]] = {role.value: [] for role in Role}
                for username in sorted(facts.users_in_campaign(campaign_id)):
                    for role in facts.roles_of(username, campaign_id):
                        members[role.value].append(username)
                info["users"] = members
                info["classes"] = sorted(facts.classes_associated_with_campaign(campaign_id))
            result.append(info)
        return result

    def _personal_record(self, username: str) -> UserPersonal | None:
        try:
            return self.session.exec(select(UserPersonal).where(UserPersonal.username == username)).first()
        except SQLAlchemyError as e:
            raise DataAccessError() from e

    def personal_information(self, usernames: Iterable[str]) -> dict[str, dict | None]:
        """username -> personal record, or None for users without one."""
        result: dict[str, dict | None] = {}
        for username in sorted(set(usernames)):
            personal = self._personal_record(username)
            result[username] = (
                None
                if personal is None
                else {
                    "first_name": personal.first_name,
                    "last_name": personal.last_name,
                    "organization": personal.organization,
                    "personal_id": personal.personal_id,
                }
            )
        return result

    def update_personal_information(self, requester: str, username: str, **fields: str | None) -> None:
        """Create or update a user's own personal record. Fields left as None are not changed."""
        self.authorization.verify_user_reads_own_account(requester, username)
        self.authorization.check_user_existence(username)
        self.authorization.verify_user_has_or_can_create_personal_info(username, **fields)

        changes = {name: value for name, value in fields.items() if value is not None}
        if not changes:
            return
        personal = self._personal_record(username) or UserPersonal(username=username)
        for name, value in changes.items():
            setattr(personal, name, value)
        self.session.add(personal)
        self._commit()
        logger.info("%s updated personal information", username)
