# SPDX-License-Identifier: Apache-2.0
"""Integration tests for survey response reads."""
import pytest
from sqlmodel import Session

from conftest import CAMPAIGN_PRIVATE, CAMPAIGN_SHARED, as_user
from ohmage.database import engine
from ohmage.models import PromptResponse, SurveyResponse

ALL = "urn:ohmage:special:all"
PROMPT = "urn:ohmage:prompt:id:"


def _read(client, requester, **body):
    payload = {"campaign_urn": CAMPAIGN_SHARED, "user_list": "bob", "column_list": ALL, "survey_id_list": ALL}
    payload.update(body)
    payload = {k: v for k, v in payload.items() if v is not None}
    return client.post("/survey_responses/read", json=payload, headers=as_user(requester))


def _columns(body):
    return {column: entry for item in body["data"] for column, entry in item.items()}


def test_analyst_reads_participant_in_shared_campaign(client):
    r = _read(client, "alice")
    assert r.status_code == 200
    body = r.json()
    assert body["result"] == "success"
    assert body["metadata"]["number_of_surveys"] == 2
    assert body["metadata"]["number_of_prompts"] == 3

    columns = _columns(body)
    assert columns["urn:ohmage:context:user"]["values"] == ["bob", "bob"]
    assert columns["urn:ohmage:context:campaign:name"]["values"] == ["Sleep", "Sleep"]
    assert columns["urn:ohmage:context:campaign:version"]["values"] == ["2.1", "2.1"]
    assert columns["urn:ohmage:context:utc_timestamp"]["values"] == ["2024-03-02 16:00:00", "2024-03-02 21:00:00"]
    assert columns["urn:ohmage:context:location:latitude"]["values"] == [34.07, None]
    assert columns[PROMPT + "hours"]["values"] == ["7", "NA"]
    assert columns[PROMPT + "mood"]["values"] == ["NA", "tired"]
    assert columns[PROMPT + "hours"]["context"]["unit"] == "hours"
    assert body["metadata"]["items"][-3:] == [PROMPT + "hours", PROMPT + "quality", PROMPT + "mood"]


def test_participant_reads_own_responses_while_running(client):
    r = _read(client, "bob")
    assert r.status_code == 200
    assert r.json()["metadata"]["number_of_surveys"] == 2


def test_participant_cannot_read_all_users(client):
    r = _read(client, "bob", user_list=ALL)
    assert r.status_code == 403
    assert r.json()["errors"][0]["code"] == "CAMPAIGN_INSUFFICIENT_PERMISSIONS"


def test_participant_cannot_read_own_responses_in_stopped_campaign(client):
    assert _read(client, "bob", campaign_urn=CAMPAIGN_PRIVATE).status_code == 403


def test_analyst_denied_in_private_campaign(client):
    # alice is not a member of the private campaign at all
    assert _read(client, "alice", campaign_urn=CAMPAIGN_PRIVATE).status_code == 403


def test_listed_user_must_belong_to_campaign(client):
    r = _read(client, "alice", user_list="bob,erin")
    assert r.status_code == 403
    assert r.json()["errors"][0]["code"] == "USER_NOT_IN_CAMPAIGN"


def test_supervisor_reads_all_users(client):
    r = _read(client, "carol", user_list=ALL, column_list="urn:ohmage:context:user")
    assert r.status_code == 200
    assert _columns(r.json())["urn:ohmage:context:user"]["values"] == ["bob", "bob"]


def test_prompt_scope(client):
    r = _read(client, "carol", survey_id_list=None, prompt_id_list="hours", column_list="urn:ohmage:context:user")
    assert r.status_code == 200
    body = r.json()
    assert body["metadata"]["items"] == ["urn:ohmage:context:user", PROMPT + "hours"]
    assert _columns(body)[PROMPT + "hours"]["values"] == ["7"]


def test_survey_scope_filters_surveys(client):
    r = _read(client, "carol", survey_id_list="evening", column_list="urn:ohmage:context:timezone")
    body = r.json()
    assert body["metadata"]["number_of_surveys"] == 1
    assert _columns(body)["urn:ohmage:context:timezone"]["values"] == ["UTC"]


def test_date_range(client):
    r = _read(client, "carol", start_date="2024-03-02T12:00:00", column_list="urn:ohmage:context:timestamp")
    assert _columns(r.json())["urn:ohmage:context:timestamp"]["values"] == ["2024-03-02 21:00:00"]


def test_suppress_metadata(client):
    body = _read(client, "carol", suppress_metadata=True).json()
    assert "metadata" not in body
    assert body["result"] == "success"


@pytest.mark.parametrize(
    "body,code",
    [
        ({"prompt_id_list": "hours"}, "SURVEY_INVALID_COLUMN_ID"),
        ({"column_list": "urn:ohmage:context:bogus"}, "SURVEY_INVALID_COLUMN_ID"),
        ({"column_list": ","}, "SURVEY_INVALID_COLUMN_ID"),
        ({"user_list": ","}, "USER_INVALID_USERNAME"),
        ({"start_date": "soon"}, "SERVER_INVALID_DATE"),
    ],
)
def test_invalid_requests(client, body, code):
    r = _read(client, "carol", **body)
    assert r.status_code == 400
    assert r.json()["errors"][0]["code"] == code


def test_unknown_campaign(client):
    r = _read(client, "carol", campaign_urn="urn:campaign:missing")
    assert r.status_code == 404
    assert r.json()["errors"][0]["code"] == "CAMPAIGN_INVALID_ID"


def test_repeated_submissions_with_repeatable_sets_stay_grouped(client):
    # Two submissions share user, timestamp and survey; only the first has a repeatable set.
    with Session(engine) as session:
        first = SurveyResponse(campaign_id=CAMPAIGN_SHARED, username="bob", survey_id="walk",
                               timestamp="2024-04-01 10:00:00")
        second = SurveyResponse(campaign_id=CAMPAIGN_SHARED, username="bob", survey_id="walk",
                                timestamp="2024-04-01 10:00:00")
        session.add(first)
        session.add(second)
        session.commit()
        session.add(PromptResponse(survey_response_id=first.id, prompt_id="steps", response="100"))
        session.add(PromptResponse(survey_response_id=first.id, prompt_id="lap", response="1",
                                   repeatable_set_id="laps", repeatable_set_iteration=0))
        session.add(PromptResponse(survey_response_id=second.id, prompt_id="distance", response="3"))
        session.commit()

    r = _read(client, "carol", survey_id_list="walk", column_list="urn:ohmage:context:repeatable_set:id")
    assert r.status_code == 200
    body = r.json()
    assert body["metadata"]["number_of_surveys"] == 2
    columns = _columns(body)
    set_ids = columns["urn:ohmage:context:repeatable_set:id"]["values"]
    assert sorted(set_ids, key=str) == sorted([None, "laps"], key=str)
    outer = set_ids.index(None)
    assert columns[PROMPT + "steps"]["values"][outer] == "100"
    assert columns[PROMPT + "distance"]["values"][outer] == "3"
    assert columns[PROMPT + "lap"]["values"][1 - outer] == "1"
