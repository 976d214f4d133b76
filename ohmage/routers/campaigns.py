# SPDX-License-Identifier: Apache-2.0
"""Campaign endpoints: list, read, users, personal, update, roles, xml check, delete."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from ohmage.core.exceptions import DataAccessError
from ohmage.core.security import get_requester
from ohmage.core.validators import (
    validate_date,
    validate_id_list,
    validate_privacy_state,
    validate_role,
    validate_running_state,
    validate_user_and_campaign_role,
)
from ohmage.database import get_session
from ohmage.dependencies import get_authorization, get_campaign_service, get_selection
from ohmage.models import Campaign
from ohmage.schemas import CampaignRoleUpdate, CampaignUpdate
from ohmage.services.authorization_service import AuthorizationService
from ohmage.services.campaign_selection_service import CampaignSelectionService
from ohmage.services.campaign_service import CampaignService

logger = logging.getLogger("ohmage.campaigns")

router = APIRouter(tags=["campaigns"])


@router.get("")
def list_campaigns(
    campaign_urn_list: str | None = Query(None),
    class_urn_list: str | None = Query(None),
    start_date: str | None = Query(None),
    end_date: str | None = Query(None),
    privacy_state: str | None = Query(None),
    running_state: str | None = Query(None),
    user_role: str | None = Query(None),
    with_extras: bool = Query(False),
    requester: str = Depends(get_requester),
    selection: CampaignSelectionService = Depends(get_selection),
    authorization: AuthorizationService = Depends(get_authorization),
    campaigns: CampaignService = Depends(get_campaign_service),
):
    """Campaigns the requester belongs to, narrowed by every supplied filter."""
    campaign_ids = validate_id_list(campaign_urn_list)
    if campaign_ids:
        authorization.campaigns_exist_and_user_belongs(campaign_ids, requester)
    selected = selection.select_campaigns(
        requester,
        campaign_ids=campaign_ids,
        class_ids=validate_id_list(class_urn_list),
        start_date=validate_date(start_date),
        end_date=validate_date(end_date),
        privacy_state=validate_privacy_state(privacy_state),
        running_state=validate_running_state(running_state),
        role=validate_role(user_role),
    )
    return {"result": "success", "data": campaigns.campaign_information(requester, selected, with_extras)}


@router.get("/{campaign_id}")
def read_campaign(
    campaign_id: str,
    requester: str = Depends(get_requester),
    authorization: AuthorizationService = Depends(get_authorization),
    campaigns: CampaignService = Depends(get_campaign_service),
):
    authorization.verify_user_can_read_campaign(requester, campaign_id)
    return {"result": "success", "data": campaigns.campaign_information(requester, [campaign_id])[0]}


@router.get("/{campaign_id}/users")
def read_campaign_users(
    campaign_id: str,
    requester: str = Depends(get_requester),
    authorization: AuthorizationService = Depends(get_authorization),
):
    """Members of the campaign and their roles."""
    authorization.check_campaign_existence(campaign_id)
    authorization.verify_user_can_read_users_in_campaign(requester, campaign_id)
    facts = authorization.facts
    users = {
        username: sorted(role.value for role in facts.roles_of(username, campaign_id))
        for username in sorted(facts.users_in_campaign(campaign_id))
    }
    return {"result": "success", "data": users}


@router.get("/{campaign_id}/personal")
def read_campaign_personal_info(
    campaign_id: str,
    requester: str = Depends(get_requester),
    authorization: AuthorizationService = Depends(get_authorization),
    selection: CampaignSelectionService = Depends(get_selection),
    campaigns: CampaignService = Depends(get_campaign_service),
):
    """Personal information of every member. Supervisors only."""
    authorization.check_campaign_existence(campaign_id)
    authorization.verify_user_can_read_users_info_in_campaign(requester, campaign_id)
    usernames = selection.users_in_campaigns([campaign_id])
    return {"result": "success", "data": campaigns.personal_information(usernames)}


@router.patch("/{campaign_id}")
def update_campaign(
    campaign_id: str,
    body: CampaignUpdate,
    requester: str = Depends(get_requester),
    session: Session = Depends(get_session),
    authorization: AuthorizationService = Depends(get_authorization),
):
    authorization.check_campaign_existence(campaign_id)
    authorization.verify_user_can_update_campaign(requester, campaign_id)
    privacy_state = validate_privacy_state(body.privacy_state)
    running_state = validate_running_state(body.running_state)

    campaign = session.get(Campaign, campaign_id)
    if body.description is not None:
        campaign.description = body.description
    if privacy_state is not None:
        campaign.privacy_state = privacy_state
    if running_state is not None:
        campaign.running_state = running_state
    session.add(campaign)
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise DataAccessError() from e
    logger.info("%s updated campaign %s", requester, campaign_id)
    return {"result": "success"}


@router.post("/{campaign_id}/roles")
def update_campaign_roles(
    campaign_id: str,
    body: CampaignRoleUpdate,
    requester: str = Depends(get_requester),
    campaigns: CampaignService = Depends(get_campaign_service),
):
    """Grant and revoke roles given as 'user;role' pairs."""
    campaigns.update_user_roles(
        requester,
        campaign_id,
        add=validate_user_and_campaign_role(body.user_role_list_add),
        remove=validate_user_and_campaign_role(body.user_role_list_remove),
    )
    return {"result": "success"}


@router.post("/{campaign_id}/xml/check")
def check_campaign_xml_update(
    campaign_id: str,
    requester: str = Depends(get_requester),
    authorization: AuthorizationService = Depends(get_authorization),
):
    """Whether the requester may replace the campaign definition right now."""
    authorization.check_campaign_existence(campaign_id)
    authorization.verify_user_can_update_campaign_xml(requester, campaign_id)
    return {"result": "success"}


@router.delete("/{campaign_id}")
def delete_campaign(
    campaign_id: str,
    requester: str = Depends(get_requester),
    campaigns: CampaignService = Depends(get_campaign_service),
):
    campaigns.delete_campaign(requester, campaign_id)
    return {"result": "success"}
