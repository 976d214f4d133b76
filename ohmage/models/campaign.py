# SPDX-License-Identifier: Apache-2.0
"""Campaign and campaign/class association models."""
from datetime import datetime

from sqlmodel import Field, SQLModel

from ohmage.core.roles import PrivacyState, RunningState


class Campaign(SQLModel, table=True):
    __tablename__ = "campaigns"
    id: str = Field(primary_key=True, max_length=255)
    name: str
    description: str | None = None
    xml: str = ""
    version: str = "1.0"
    privacy_state: PrivacyState = PrivacyState.PRIVATE
    running_state: RunningState = RunningState.RUNNING
    # Naive UTC; filters compare against naive datetimes.
    creation_timestamp: datetime = Field(default_factory=datetime.utcnow, index=True)


class CampaignClass(SQLModel, table=True):
    __tablename__ = "campaign_classes"
    id: int | None = Field(default=None, primary_key=True)
    campaign_id: str = Field(foreign_key="campaigns.id", index=True)
    class_id: str = Field(index=True)
