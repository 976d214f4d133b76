# SPDX-License-Identifier: Apache-2.0
"""User endpoints: own account, own personal record and cross-user personal information."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlmodel import Session

from ohmage.core.exceptions import ErrorCode, InvalidArgumentError
from ohmage.core.security import get_requester
from ohmage.core.validators import validate_id_list, validate_username
from ohmage.database import get_session
from ohmage.dependencies import get_authorization, get_campaign_service
from ohmage.models import User
from ohmage.schemas import PersonalInfoRead, PersonalInfoUpdate
from ohmage.services.authorization_service import AuthorizationService
from ohmage.services.campaign_service import CampaignService

router = APIRouter(tags=["users"])


@router.post("/personal")
def read_personal_info(
    body: PersonalInfoRead,
    requester: str = Depends(get_requester),
    authorization: AuthorizationService = Depends(get_authorization),
    campaigns: CampaignService = Depends(get_campaign_service),
):
    """Personal information for the listed users, if the requester supervises them."""
    usernames = [validate_username(u) for u in validate_id_list(body.user_list) or []]
    if not usernames:
        raise InvalidArgumentError("The user list is missing.", ErrorCode.USER_INVALID_USERNAME)
    authorization.verify_users_exist(usernames)
    authorization.verify_user_can_read_users_personal_info(requester, usernames)
    return {"result": "success", "data": campaigns.personal_information(usernames)}


@router.get("/{user_id}")
def read_user(
    user_id: str,
    requester: str = Depends(get_requester),
    session: Session = Depends(get_session),
    authorization: AuthorizationService = Depends(get_authorization),
):
    authorization.verify_user_reads_own_account(requester, user_id)
    authorization.check_user_existence(user_id)
    user = session.get(User, user_id)
    return {
        "result": "success",
        "data": {
            "username": user.username,
            "email_address": user.email_address,
            "admin": user.admin,
            "enabled": user.enabled,
            "campaign_creation_privilege": user.campaign_creation_privilege,
        },
    }


@router.post("/{user_id}/personal")
def update_personal_info(
    user_id: str,
    body: PersonalInfoUpdate,
    requester: str = Depends(get_requester),
    campaigns: CampaignService = Depends(get_campaign_service),
):
    """Create or update the requester's own personal record."""
    campaigns.update_personal_information(requester, user_id, **body.model_dump())
    return {"result": "success"}
