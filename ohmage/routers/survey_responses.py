# SPDX-License-Identifier: Apache-2.0
"""Survey response read: authorize, query ordered rows, project, write."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlmodel import Session

from ohmage.config import settings
from ohmage.core.exceptions import ErrorCode, InvalidArgumentError
from ohmage.core.security import get_requester
from ohmage.core.validators import validate_date, validate_id_list
from ohmage.database import get_session
from ohmage.dependencies import get_authorization, get_survey_response_queries
from ohmage.models import Campaign
from ohmage.schemas import SurveyResponseRead
from ohmage.services.authorization_service import AuthorizationService
from ohmage.services.projection_service import PROMPT_PREFIX, SPECIAL_ALL, project
from ohmage.services.response_writer import write_survey_response_document
from ohmage.services.survey_response_service import SurveyResponseQueries

logger = logging.getLogger("ohmage.survey_responses")

router = APIRouter(tags=["survey_responses"])


def _is_all(values: list[str] | None) -> bool:
    return bool(values) and values[0] == SPECIAL_ALL


def _bare_prompt_id(prompt_id: str) -> str:
    return prompt_id[len(PROMPT_PREFIX):] if prompt_id.startswith(PROMPT_PREFIX) else prompt_id


@router.post("/read")
def read_survey_responses(
    body: SurveyResponseRead,
    requester: str = Depends(get_requester),
    session: Session = Depends(get_session),
    authorization: AuthorizationService = Depends(get_authorization),
    queries: SurveyResponseQueries = Depends(get_survey_response_queries),
):
    campaign_id = body.campaign_urn.strip()
    usernames = validate_id_list(body.user_list)
    columns = validate_id_list(body.column_list)
    prompt_ids = validate_id_list(body.prompt_id_list)
    survey_ids = validate_id_list(body.survey_id_list)
    start_date = validate_date(body.start_date)
    end_date = validate_date(body.end_date)

    if not usernames:
        raise InvalidArgumentError("The user list is missing.", ErrorCode.USER_INVALID_USERNAME)
    if not columns:
        raise InvalidArgumentError("The column list is missing.", ErrorCode.SURVEY_INVALID_COLUMN_ID)
    if (prompt_ids is None) == (survey_ids is None):
        raise InvalidArgumentError(
            "Exactly one of a survey id list and a prompt id list is required.", ErrorCode.SURVEY_INVALID_COLUMN_ID
        )

    authorization.campaign_exists_and_user_belongs(campaign_id, requester)
    if _is_all(usernames):
        authorization.requester_can_view_users_survey_responses(campaign_id, requester)
        user_filter = None
    else:
        for target in usernames:
            authorization.requester_can_view_users_survey_responses(campaign_id, requester, target)
        authorization.verify_users_exist_in_campaign(campaign_id, usernames)
        user_filter = usernames

    rows = queries.retrieve_rows(
        campaign_id,
        usernames=user_filter,
        survey_ids=None if survey_ids is None or _is_all(survey_ids) else survey_ids,
        prompt_ids=None if prompt_ids is None or _is_all(prompt_ids) else [_bare_prompt_id(p) for p in prompt_ids],
        start_date=start_date,
        end_date=end_date,
    )
    logger.info("%s read %d prompt responses from %s", requester, len(rows), campaign_id)

    campaign = session.get(Campaign, campaign_id)
    document = project(
        rows,
        columns,
        prompt_ids,
        survey_ids,
        settings.declared_columns,
        campaign.name,
        campaign.version,
        enforce_grouping=settings.projection_enforce_grouping,
    )
    return write_survey_response_document(document, suppress_metadata=body.suppress_metadata)
