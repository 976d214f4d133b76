# SPDX-License-Identifier: Apache-2.0
"""Per-request wiring of the fact provider and services (FastAPI Depends)."""
from fastapi import Depends
from sqlmodel import Session

from ohmage.database import get_session
from ohmage.services.authorization_service import AuthorizationService
from ohmage.services.campaign_selection_service import CampaignSelectionService
from ohmage.services.campaign_service import CampaignService
from ohmage.services.fact_provider import SqlFactProvider
from ohmage.services.survey_response_service import SurveyResponseQueries


def get_facts(session: Session = Depends(get_session)) -> SqlFactProvider:
    return SqlFactProvider(session)


def get_selection(facts: SqlFactProvider = Depends(get_facts)) -> CampaignSelectionService:
    return CampaignSelectionService(facts)


def get_authorization(
    facts: SqlFactProvider = Depends(get_facts),
    selection: CampaignSelectionService = Depends(get_selection),
) -> AuthorizationService:
    return AuthorizationService(facts, selection)


def get_campaign_service(
    session: Session = Depends(get_session),
    authorization: AuthorizationService = Depends(get_authorization),
) -> CampaignService:
    return CampaignService(session, authorization)


def get_survey_response_queries(session: Session = Depends(get_session)) -> SurveyResponseQueries:
    return SurveyResponseQueries(session)
