# SPDX-License-Identifier: Apache-2.0
"""CampaignService store failures surface as DataAccessError."""
import pytest
from sqlmodel import Session

from conftest import FakeFacts
from ohmage.core.exceptions import DataAccessError
from ohmage.core.roles import Role
from ohmage.database import make_engine
from ohmage.services.authorization_service import AuthorizationService
from ohmage.services.campaign_service import CampaignService

CAMPAIGN = "urn:campaign:c1"


@pytest.fixture
def service():
    facts = FakeFacts()
    facts.add_campaign(CAMPAIGN)
    facts.grant("sup", CAMPAIGN, Role.SUPERVISOR)
    facts.grant("bob", CAMPAIGN, Role.PARTICIPANT)
    # A fresh in-memory database has no tables, so every statement fails.
    with Session(make_engine("sqlite://")) as session:
        yield CampaignService(session, AuthorizationService(facts))


def test_delete_campaign_store_failure(service):
    with pytest.raises(DataAccessError) as exc:
        service.delete_campaign("sup", CAMPAIGN)
    assert exc.value.__cause__ is not None


def test_revoke_role_store_failure(service):
    with pytest.raises(DataAccessError):
        service.update_user_roles("sup", CAMPAIGN, remove={"bob": {Role.PARTICIPANT}})


def test_personal_information_store_failure(service):
    with pytest.raises(DataAccessError):
        service.personal_information(["bob"])
