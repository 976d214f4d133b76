# SPDX-License-Identifier: Apache-2.0
"""pytest fixtures: in-memory fact provider for engine tests, seeded SQLite for API tests."""
import os

os.environ["OHMAGE_DATABASE_URL"] = "sqlite://"

from dataclasses import dataclass, field
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from ohmage.core.roles import ClassRole, PrivacyState, Role, RunningState
from ohmage.database import engine
from ohmage.main import app
from ohmage.models import (
    Campaign,
    CampaignClass,
    PromptResponse,
    SurveyResponse,
    User,
    UserCampaignRole,
    UserClass,
    UserPersonal,
)


@dataclass
class FakeFacts:
    """Dictionary-backed FactProvider. Campaigns default to PRIVATE / RUNNING with no responses."""

    roles: dict = field(default_factory=dict)  # (username, campaign_id) -> set[Role]
    privacy: dict = field(default_factory=dict)
    running: dict = field(default_factory=dict)
    responses: dict = field(default_factory=dict)
    campaign_classes: dict = field(default_factory=dict)  # campaign_id -> set[class_id]
    created: dict = field(default_factory=dict)
    privileged: dict = field(default_factory=dict)  # username -> set[class_id]
    users: set = field(default_factory=set)
    admins: set = field(default_factory=set)
    creators: set = field(default_factory=set)
    personal: set = field(default_factory=set)  # usernames with a personal record
    campaigns: set = field(default_factory=set)

    def add_campaign(self, campaign_id, privacy=PrivacyState.PRIVATE, running=RunningState.RUNNING,
                     responses=0, classes=(), created=None):
        self.campaigns.add(campaign_id)
        self.privacy[campaign_id] = privacy
        self.running[campaign_id] = running
        self.responses[campaign_id] = responses
        self.campaign_classes[campaign_id] = set(classes)
        self.created[campaign_id] = created or datetime(2024, 1, 1)

    def grant(self, username, campaign_id, *roles):
        self.users.add(username)
        self.roles.setdefault((username, campaign_id), set()).update(roles)

    def campaign_exists(self, campaign_id):
        return campaign_id in self.campaigns

    def user_exists(self, username):
        return username in self.users

    def user_is_admin(self, username):
        return username in self.admins

    def user_can_create_campaigns(self, username):
        return username in self.creators

    def user_has_personal_info(self, username):
        return username in self.personal

    def roles_of(self, username, campaign_id):
        return set(self.roles.get((username, campaign_id), set()))

    def campaign_privacy_state(self, campaign_id):
        return self.privacy.get(campaign_id)

    def campaign_running_state(self, campaign_id):
        return self.running.get(campaign_id)

    def response_count_for_campaign(self, campaign_id):
        return self.responses.get(campaign_id, 0)

    def campaigns_associated_with_class(self, class_id):
        return {c for c, classes in self.campaign_classes.items() if class_id in classes}

    def classes_associated_with_campaign(self, campaign_id):
        return set(self.campaign_classes.get(campaign_id, set()))

    def campaigns_on_or_after(self, when):
        return {c for c, ts in self.created.items() if ts >= when}

    def campaigns_on_or_before(self, when):
        return {c for c, ts in self.created.items() if ts <= when}

    def campaigns_with_privacy_state(self, state):
        return {c for c, s in self.privacy.items() if s == state}

    def campaigns_with_running_state(self, state):
        return {c for c, s in self.running.items() if s == state}

    def campaigns_where_user_has_role(self, username, role):
        return {c for (u, c), roles in self.roles.items() if u == username and role in roles}

    def all_campaigns_for_user(self, username):
        return {c for (u, c), roles in self.roles.items() if u == username and roles}

    def classes_where_user_privileged(self, username):
        return set(self.privileged.get(username, set()))

    def users_in_campaign(self, campaign_id):
        return {u for (u, c), roles in self.roles.items() if c == campaign_id and roles}


@pytest.fixture
def facts():
    return FakeFacts()


CAMPAIGN_SHARED = "urn:campaign:shared"
CAMPAIGN_PRIVATE = "urn:campaign:private"
CLASS_ID = "urn:class:k1"


def seed(session: Session) -> None:
    """
    Two campaigns. In the shared one carol supervises, dave authors, alice analyses and
    bob participates; bob has two surveys of responses there. The private campaign is
    stopped, with carol as author and bob as participant.
    """
    for username in ("alice", "bob", "carol", "dave", "erin"):
        session.add(User(username=username, email_address=f"{username}@example.org", admin=username == "erin"))
    session.add(UserPersonal(username="bob", first_name="Bob", last_name="Jones", organization="UCLA", personal_id="b-1"))
    session.add(UserPersonal(username="alice", first_name="Alice", last_name="Smith", organization="UCLA", personal_id="a-1"))
    session.add(Campaign(
        id=CAMPAIGN_SHARED, name="Sleep", description="Sleep study", version="2.1",
        privacy_state=PrivacyState.SHARED, running_state=RunningState.RUNNING,
        creation_timestamp=datetime(2024, 3, 1),
    ))
    session.add(Campaign(
        id=CAMPAIGN_PRIVATE, name="Diet", privacy_state=PrivacyState.PRIVATE,
        running_state=RunningState.STOPPED, creation_timestamp=datetime(2024, 6, 1),
    ))
    session.add(CampaignClass(campaign_id=CAMPAIGN_SHARED, class_id=CLASS_ID))
    session.add(UserClass(username="carol", class_id=CLASS_ID, role=ClassRole.PRIVILEGED))
    session.add(UserClass(username="bob", class_id=CLASS_ID, role=ClassRole.RESTRICTED))
    for username, campaign_id, role in [
        ("carol", CAMPAIGN_SHARED, Role.SUPERVISOR),
        ("dave", CAMPAIGN_SHARED, Role.AUTHOR),
        ("alice", CAMPAIGN_SHARED, Role.ANALYST),
        ("bob", CAMPAIGN_SHARED, Role.PARTICIPANT),
        ("carol", CAMPAIGN_PRIVATE, Role.AUTHOR),
        ("bob", CAMPAIGN_PRIVATE, Role.PARTICIPANT),
    ]:
        session.add(UserCampaignRole(username=username, campaign_id=campaign_id, role=role))
    session.commit()

    morning = SurveyResponse(
        campaign_id=CAMPAIGN_SHARED, username="bob", client="android", survey_id="morning",
        timestamp="2024-03-02 08:00:00", timezone="America/Los_Angeles", location_status="valid",
        location='{"latitude": 34.07, "longitude": -118.44, "accuracy": 12.5, "provider": "GPS", "timestamp": "2024-03-02 07:59:58"}',
    )
    evening = SurveyResponse(
        campaign_id=CAMPAIGN_SHARED, username="bob", client="android", survey_id="evening",
        timestamp="2024-03-02 21:00:00", timezone="UTC",
    )
    session.add(morning)
    session.add(evening)
    session.commit()
    session.add(PromptResponse(survey_response_id=morning.id, prompt_id="hours", prompt_type="number",
                               display_label="Hours slept", display_type="count", unit="hours", response="7"))
    session.add(PromptResponse(survey_response_id=morning.id, prompt_id="quality", prompt_type="single_choice",
                               display_label="Quality", display_type="category", response="good"))
    session.add(PromptResponse(survey_response_id=evening.id, prompt_id="mood", prompt_type="text",
                               display_label="Mood", response="tired"))
    session.commit()


@pytest.fixture
def db():
    """Fresh schema with seed data for every test. Returns the engine."""
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        seed(session)
    return engine


@pytest.fixture
def session(db):
    with Session(db) as session:
        yield session


@pytest.fixture
def client(db):
    """FastAPI test client over the seeded database."""
    return TestClient(app)


def as_user(username: str) -> dict:
    return {"X-Ohmage-User": username}
