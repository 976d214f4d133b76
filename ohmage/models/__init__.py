# SPDX-License-Identifier: Apache-2.0
"""SQLModel table definitions."""
from ohmage.models.campaign import Campaign, CampaignClass
from ohmage.models.survey import PromptResponse, SurveyResponse
from ohmage.models.user import User, UserCampaignRole, UserClass, UserPersonal

__all__ = [
    "Campaign",
    "CampaignClass",
    "PromptResponse",
    "SurveyResponse",
    "User",
    "UserCampaignRole",
    "UserClass",
    "UserPersonal",
]
