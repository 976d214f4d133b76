# SPDX-License-Identifier: Apache-2.0
"""
Authorization rules for campaigns and users.

Every check returns None when the operation is allowed and raises otherwise:
InsufficientPermissionsError for a denial, UnknownEntityError for a missing campaign or
user, InvalidArgumentError for unusable input. Checks read facts only; nothing is written,
so a denial has no side effect. Batch checks stop at the first failing element.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

from ohmage.core.exceptions import (
    ErrorCode,
    InsufficientPermissionsError,
    InvalidArgumentError,
    UnknownEntityError,
)
from ohmage.core.roles import MANAGING_ROLES, PrivacyState, Role, RunningState
from ohmage.services.campaign_selection_service import CampaignSelectionService
from ohmage.services.fact_provider import FactProvider

logger = logging.getLogger("ohmage.authorization")

RESPONSES_EXIST_XML = "Survey responses exist; therefore the XML can no longer be modified."
RESPONSES_EXIST_DELETE = "The campaign has responses; therefore, you can no longer delete it."


def _deny(message: str, code: ErrorCode = ErrorCode.CAMPAIGN_INSUFFICIENT_PERMISSIONS):
    logger.debug("Denied: %s", message)
    raise InsufficientPermissionsError(message, code)


class AuthorizationService:
    def __init__(self, facts: FactProvider, selection: CampaignSelectionService | None = None):
        self.facts = facts
        self.selection = selection or CampaignSelectionService(facts)

    # Membership

    def check_campaign_existence(self, campaign_id: str) -> None:
        if not self.facts.campaign_exists(campaign_id):
            raise UnknownEntityError(f"The campaign does not exist: {campaign_id}", ErrorCode.CAMPAIGN_INVALID_ID)

    def campaign_exists_and_user_belongs(self, campaign_id: str, username: str) -> None:
        self.check_campaign_existence(campaign_id)
        if not self.facts.roles_of(username, campaign_id):
            _deny(f"The user does not belong to the campaign: {campaign_id}")

    def campaigns_exist_and_user_belongs(self, campaign_ids: Iterable[str], username: str) -> None:
        for campaign_id in campaign_ids:
            self.campaign_exists_and_user_belongs(campaign_id, username)

    def verify_user_can_read_campaign(self, username: str, campaign_id: str) -> None:
        """Campaign metadata is readable by anyone with a role in the campaign."""
        self.campaign_exists_and_user_belongs(campaign_id, username)

    def verify_allowed_user_role_in_campaign(
        self, username: str, campaign_id: str, allowed_roles: Iterable[Role]
    ) -> None:
        roles = self.facts.roles_of(username, campaign_id)
        if not roles:
            _deny("User does not belong to campaign.", ErrorCode.CAMPAIGN_INVALID_ID)
        if roles.isdisjoint(allowed_roles):
            _deny("User does not have a correct role to perform the operation.")

    def verify_user_has_roles_in_campaign(self, username: str, campaign_id: str, roles: Iterable[Role]) -> None:
        """The user must hold every one of the roles, not just one of them."""
        if not self.facts.roles_of(username, campaign_id).issuperset(roles):
            _deny(f"The user doesn't have sufficient permissions in the campaign: {campaign_id}")

    def verify_user_has_roles_in_campaigns(
        self, username: str, campaign_ids: Iterable[str], roles: Iterable[Role]
    ) -> None:
        roles = set(roles)
        for campaign_id in campaign_ids:
            self.verify_user_has_roles_in_campaign(username, campaign_id, roles)

    def verify_users_exist_in_campaign(self, campaign_id: str, usernames: list[str] | None) -> None:
        if not campaign_id or not campaign_id.strip() or usernames is None:
            raise InvalidArgumentError("A campaign ID and a list of usernames are required.")
        for username in usernames:
            if not self.facts.roles_of(username, campaign_id):
                _deny(
                    f"User in usernameList does not belong to campaign. Username: {username} Campaign ID: {campaign_id}",
                    ErrorCode.USER_NOT_IN_CAMPAIGN,
                )

    # Survey responses

    def requester_can_view_users_survey_responses(
        self, campaign_id: str, requester: str, target: str | None = None
    ) -> None:
        """
        Allowed when any of these hold:

        - the requester is a supervisor
        - the requester is an author
        - the requester is an analyst and the campaign is shared
        - the requester is the target user and the campaign is running

        target=None asks whether the requester may read responses about any user.
        A missing campaign yields no roles and is denied like any other failure.
        """
        logger.info("Verifying that %s can read survey responses in %s.", requester, campaign_id)
        roles = self.facts.roles_of(requester, campaign_id)

        if Role.SUPERVISOR in roles:
            return
        if Role.AUTHOR in roles:
            return
        if Role.ANALYST in roles and self.facts.campaign_privacy_state(campaign_id) == PrivacyState.SHARED:
            return
        if requester == target and self.facts.campaign_running_state(campaign_id) == RunningState.RUNNING:
            return

        _deny("The user does not have sufficient permissions to read information about other users.")

    # Campaign management

    def verify_user_can_update_campaign(self, username: str, campaign_id: str) -> None:
        if self.facts.roles_of(username, campaign_id) & MANAGING_ROLES:
            return
        _deny("The user is not allowed to update the campaign.")

    def verify_user_can_update_campaign_xml(self, username: str, campaign_id: str) -> None:
        if not self.facts.roles_of(username, campaign_id) & MANAGING_ROLES:
            _deny("The user is not allowed to modify the campaign's XML.")
        if self.facts.response_count_for_campaign(campaign_id) != 0:
            _deny(RESPONSES_EXIST_XML)

    def verify_user_can_grant_or_revoke_roles(self, username: str, campaign_id: str, roles: Iterable[Role]) -> None:
        """Supervisors may grant anything; authors anything but supervisor."""
        requester_roles = self.facts.roles_of(username, campaign_id)
        if Role.SUPERVISOR in requester_roles:
            return
        if Role.AUTHOR in requester_roles:
            if Role.SUPERVISOR not in set(roles):
                return
            _deny("The user is not allowed to grant the supervisor privilege.")
        _deny("The user is not allowed to grant privileges.")

    def verify_user_can_delete_campaign(self, username: str, campaign_id: str) -> None:
        roles = self.facts.roles_of(username, campaign_id)
        if Role.SUPERVISOR in roles:
            return
        if Role.AUTHOR in roles:
            if self.facts.response_count_for_campaign(campaign_id) == 0:
                return
            _deny(RESPONSES_EXIST_DELETE)
        _deny("You do not have sufficient permissions to delete this campaign.")

    def verify_user_can_create_campaigns(self, username: str) -> None:
        if not self.facts.user_can_create_campaigns(username):
            _deny("The user does not have permission to create new campaigns.")

    # Campaign membership listings

    def verify_user_can_read_users_in_campaign(self, username: str, campaign_id: str) -> None:
        if self.facts.roles_of(username, campaign_id) & MANAGING_ROLES:
            return
        _deny(
            "The user doesn't have sufficient permissions to read the users and their roles for a campaign: "
            + campaign_id
        )

    def verify_user_can_read_users_in_campaigns(self, username: str, campaign_ids: Iterable[str]) -> None:
        for campaign_id in campaign_ids:
            self.verify_user_can_read_users_in_campaign(username, campaign_id)

    def verify_user_can_read_classes_associated_with_campaign(self, username: str, campaign_id: str) -> None:
        if self.facts.roles_of(username, campaign_id) & MANAGING_ROLES:
            return
        _deny(
            "The user doesn't have sufficient permissions to read the classes associated with a campaign: "
            + campaign_id
        )

    def verify_user_can_read_classes_associated_with_campaigns(
        self, username: str, campaign_ids: Iterable[str]
    ) -> None:
        for campaign_id in campaign_ids:
            self.verify_user_can_read_classes_associated_with_campaign(username, campaign_id)

    # Personal information

    def verify_user_can_read_users_info_in_campaign(self, username: str, campaign_id: str) -> None:
        """Only supervisors may read the personal information of a campaign's users."""
        if Role.SUPERVISOR in self.facts.roles_of(username, campaign_id):
            return
        _deny(
            "The user is not allowed to read the personal information of the users in the following campaign: "
            + campaign_id
        )

    def verify_user_can_read_users_info_in_campaigns(self, username: str, campaign_ids: Iterable[str]) -> None:
        for campaign_id in campaign_ids:
            self.verify_user_can_read_users_info_in_campaign(username, campaign_id)

    def verify_user_can_read_users_personal_info(self, username: str, usernames: Iterable[str] | None) -> None:
        """
        A lone request for one's own record is always allowed. Any other batch, including
        a batch that merely contains the requester, requires every listed user to share
        at least one campaign with the requester where the requester is a supervisor,
        narrowed by each class in which the requester is privileged.
        """
        targets = list(usernames or [])
        if not targets or (len(targets) == 1 and targets[0] == username):
            return

        supervisor_campaigns = self.selection.select_campaigns(username, role=Role.SUPERVISOR)
        privileged_classes = self.facts.classes_where_user_privileged(username)

        for target in targets:
            reachable = self.selection.select_campaigns(
                target,
                campaign_ids=supervisor_campaigns & self.facts.all_campaigns_for_user(target),
                class_ids=privileged_classes,
            )
            if not reachable:
                _deny(
                    "The user is not allowed to view personal information about a user in the list: " + target,
                    ErrorCode.USER_INSUFFICIENT_PERMISSIONS,
                )

    # Users

    def check_user_existence(self, username: str, should_exist: bool = True) -> None:
        if self.facts.user_exists(username):
            if not should_exist:
                raise InvalidArgumentError(
                    f"The following user already exists: {username}", ErrorCode.USER_INVALID_USERNAME
                )
        elif should_exist:
            raise UnknownEntityError(f"The following user does not exist: {username}", ErrorCode.USER_INVALID_USERNAME)

    def verify_users_exist(self, usernames: Iterable[str], should_exist: bool = True) -> None:
        for username in usernames:
            self.check_user_existence(username, should_exist)

    def verify_user_has_or_can_create_personal_info(
        self,
        username: str,
        first_name: str | None = None,
        last_name: str | None = None,
        organization: str | None = None,
        personal_id: str | None = None,
    ) -> None:
        """
        An existing personal record may be updated field by field. Without one, either
        nothing is being set or all four fields must be supplied to create it.
        """
        if self.facts.user_has_personal_info(username):
            return
        fields = [
            (first_name, ErrorCode.USER_INVALID_FIRST_NAME_VALUE, "a first name"),
            (last_name, ErrorCode.USER_INVALID_LAST_NAME_VALUE, "a last name"),
            (organization, ErrorCode.USER_INVALID_ORGANIZATION_VALUE, "an organization"),
            (personal_id, ErrorCode.USER_INVALID_PERSONAL_ID_VALUE, "a personal ID"),
        ]
        if all(value is None for value, _, _ in fields):
            return
        for value, code, what in fields:
            if value is None:
                raise InvalidArgumentError(
                    f"The user doesn't have personal information yet, and {what} is necessary to create one.", code
                )

    def verify_user_is_admin(self, username: str) -> None:
        if not self.facts.user_is_admin(username):
            _deny("The user is not an admin.", ErrorCode.USER_INSUFFICIENT_PERMISSIONS)

    def verify_user_reads_own_account(self, requester: str, user_id: str | None) -> None:
        if not user_id:
            raise InvalidArgumentError("The user's unique identifier is missing.", ErrorCode.USER_INVALID_USERNAME)
        if requester != user_id:
            _deny("A user may only view their own information.", ErrorCode.USER_INSUFFICIENT_PERMISSIONS)
