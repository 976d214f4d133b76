# SPDX-License-Identifier: Apache-2.0
"""Survey response and prompt response models."""
from sqlmodel import Field, SQLModel


class SurveyResponse(SQLModel, table=True):
    __tablename__ = "survey_responses"
    id: int | None = Field(default=None, primary_key=True)
    campaign_id: str = Field(foreign_key="campaigns.id", index=True)
    username: str = Field(foreign_key="users.username", index=True)
    client: str = ""
    survey_id: str
    # Local wall-clock time of the device, "YYYY-MM-DD HH:MM:SS"
    timestamp: str
    timezone: str = "UTC"
    location_status: str = "unavailable"
    location: str | None = None
    launch_context: str | None = None


class PromptResponse(SQLModel, table=True):
    __tablename__ = "prompt_responses"
    id: int | None = Field(default=None, primary_key=True)
    survey_response_id: int = Field(foreign_key="survey_responses.id", index=True)
    prompt_id: str
    prompt_type: str = "text"
    display_label: str | None = None
    display_type: str | None = None
    unit: str | None = None
    repeatable_set_id: str | None = None
    repeatable_set_iteration: int | None = None
    response: str | None = None
