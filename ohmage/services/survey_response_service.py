# SPDX-License-Identifier: Apache-2.0
"""Read prompt-level result rows for a campaign in the order the projection requires."""
from __future__ import annotations

from collections.abc import Collection
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ohmage.core.exceptions import DataAccessError
from ohmage.models import PromptResponse, SurveyResponse
from ohmage.services.projection_service import ResultRow

_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class SurveyResponseQueries:
    def __init__(self, session: Session):
        self.session = session

    def retrieve_rows(
        self,
        campaign_id: str,
        usernames: Collection[str] | None = None,
        survey_ids: Collection[str] | None = None,
        prompt_ids: Collection[str] | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> list[ResultRow]:
        """
        Rows ordered by user, timestamp, survey id, repeatable set id and iteration, then
        prompt id, so that every meta-row identity is contiguous. None filters are not applied.
        """
        stmt = (
            select(SurveyResponse, PromptResponse)
            .join(PromptResponse, PromptResponse.survey_response_id == SurveyResponse.id)
            .where(SurveyResponse.campaign_id == campaign_id)
        )
        if usernames is not None:
            stmt = stmt.where(SurveyResponse.username.in_(list(usernames)))
        if survey_ids is not None:
            stmt = stmt.where(SurveyResponse.survey_id.in_(list(survey_ids)))
        if prompt_ids is not None:
            stmt = stmt.where(PromptResponse.prompt_id.in_(list(prompt_ids)))
        # Timestamps are stored zero-padded, so string comparison orders them.
        if start_date is not None:
            stmt = stmt.where(SurveyResponse.timestamp >= start_date.strftime(_TIMESTAMP_FORMAT))
        if end_date is not None:
            stmt = stmt.where(SurveyResponse.timestamp <= end_date.strftime(_TIMESTAMP_FORMAT))
        stmt = stmt.order_by(
            SurveyResponse.username,
            SurveyResponse.timestamp,
            SurveyResponse.survey_id,
            PromptResponse.repeatable_set_id,
            PromptResponse.repeatable_set_iteration,
            SurveyResponse.id,
            PromptResponse.prompt_id,
        )
        try:
            results = self.session.exec(stmt).all()
        except SQLAlchemyError as e:
            raise DataAccessError() from e

        return [
            ResultRow(
                login_id=sr.username,
                client=sr.client,
                survey_id=sr.survey_id,
                prompt_id=pr.prompt_id,
                timestamp=sr.timestamp,
                timezone=sr.timezone,
                display_value=pr.response,
                display_label=pr.display_label,
                prompt_type=pr.prompt_type,
                repeatable_set_id=pr.repeatable_set_id,
                repeatable_set_iteration=pr.repeatable_set_iteration,
                location=sr.location,
                location_status=sr.location_status,
                launch_context=sr.launch_context,
                display_type=pr.display_type,
                unit=pr.unit,
            )
            for sr, pr in results
        ]
