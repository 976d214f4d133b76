# SPDX-License-Identifier: Apache-2.0
"""Validation of raw request parameters: id lists, roles, states, dates and user/role pairs."""
from __future__ import annotations

import logging
import re
from datetime import date, datetime

from ohmage.core.exceptions import ErrorCode, InvalidArgumentError
from ohmage.core.roles import PrivacyState, Role, RunningState

logger = logging.getLogger("ohmage.validators")

LIST_ITEM_SEPARATOR = ","
ENTITY_ROLE_SEPARATOR = ";"

_USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9._@+-]{1,255}$")


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def validate_username(value: str | None) -> str | None:
    """Return the trimmed username, None if blank. Raises on illegal characters."""
    if _is_blank(value):
        return None
    value = value.strip()
    if not _USERNAME_PATTERN.match(value):
        raise InvalidArgumentError(f"The username is invalid: {value}", ErrorCode.USER_INVALID_USERNAME)
    return value


def validate_role(value: str | None) -> Role | None:
    if _is_blank(value):
        return None
    try:
        return Role(value.strip().lower())
    except ValueError:
        raise InvalidArgumentError(f"Unknown campaign role: {value}", ErrorCode.CAMPAIGN_INVALID_ROLE) from None


def validate_privacy_state(value: str | None) -> PrivacyState | None:
    if _is_blank(value):
        return None
    try:
        return PrivacyState(value.strip().lower())
    except ValueError:
        raise InvalidArgumentError(
            f"Unknown campaign privacy state: {value}", ErrorCode.CAMPAIGN_INVALID_PRIVACY_STATE
        ) from None


def validate_running_state(value: str | None) -> RunningState | None:
    if _is_blank(value):
        return None
    try:
        return RunningState(value.strip().lower())
    except ValueError:
        raise InvalidArgumentError(
            f"Unknown campaign running state: {value}", ErrorCode.CAMPAIGN_INVALID_RUNNING_STATE
        ) from None


def validate_id_list(value: str | None) -> list[str] | None:
    """
    Split a comma separated list. Empty items are skipped, duplicates dropped, order kept.
    None for a missing parameter; an empty list when only separators were given.
    """
    if value is None:
        return None
    items = [item.strip() for item in value.split(LIST_ITEM_SEPARATOR)]
    return list(dict.fromkeys(item for item in items if item))


def validate_date(value: str | None) -> datetime | None:
    """ISO date or datetime; a bare date means midnight."""
    if _is_blank(value):
        return None
    value = value.strip()
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        pass
    try:
        d = date.fromisoformat(value)
    except ValueError:
        raise InvalidArgumentError(f"The date is invalid: {value}", ErrorCode.SERVER_INVALID_DATE) from None
    return datetime(d.year, d.month, d.day)


def validate_user_and_campaign_role(value: str | None) -> dict[str, set[Role]] | None:
    """
    Parse "user;role,user2;role" into username -> roles. A user may appear more than once;
    roles are collected into a set. Returns None when the value is blank or carries
    nothing but separators.
    """
    logger.info("Validating a list of user and campaign role pairs.")
    if _is_blank(value):
        return None

    result: dict[str, set[Role]] = {}
    for raw_pair in value.split(LIST_ITEM_SEPARATOR):
        pair = raw_pair.strip()
        if not pair or pair == ENTITY_ROLE_SEPARATOR:
            continue
        parts = pair.split(ENTITY_ROLE_SEPARATOR)
        if len(parts) != 2:
            raise InvalidArgumentError(
                f"The user campaign-role list is invalid: {pair}", ErrorCode.CAMPAIGN_INVALID_ROLE
            )
        username = validate_username(parts[0])
        if username is None:
            raise InvalidArgumentError(
                f"The username in the username, campaign role pair is missing: {pair}",
                ErrorCode.USER_INVALID_USERNAME,
            )
        role = validate_role(parts[1])
        if role is None:
            raise InvalidArgumentError(
                f"The campaign role in the username, campaign role pair is missing: {pair}",
                ErrorCode.CAMPAIGN_INVALID_ROLE,
            )
        result.setdefault(username, set()).add(role)

    return result or None
