# SPDX-License-Identifier: Apache-2.0
"""Pydantic request schemas. List-valued fields keep the comma separated wire format."""
from pydantic import BaseModel, Field as PydanticField


class SurveyResponseRead(BaseModel):
    campaign_urn: str = PydanticField(..., max_length=255)
    user_list: str = PydanticField(..., description="Comma separated usernames or urn:ohmage:special:all")
    column_list: str = PydanticField(..., description="Comma separated column URNs or urn:ohmage:special:all")
    prompt_id_list: str | None = None
    survey_id_list: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    suppress_metadata: bool = False


class CampaignUpdate(BaseModel):
    description: str | None = PydanticField(None, max_length=2000)
    privacy_state: str | None = None
    running_state: str | None = None


class CampaignRoleUpdate(BaseModel):
    user_role_list_add: str | None = PydanticField(None, description="user;role,user;role")
    user_role_list_remove: str | None = PydanticField(None, description="user;role,user;role")


class PersonalInfoRead(BaseModel):
    user_list: str


class PersonalInfoUpdate(BaseModel):
    first_name: str | None = PydanticField(None, max_length=255)
    last_name: str | None = PydanticField(None, max_length=255)
    organization: str | None = PydanticField(None, max_length=255)
    personal_id: str | None = PydanticField(None, max_length=255)
