# SPDX-License-Identifier: Apache-2.0
"""Custom exception classes and the machine-readable error codes they carry."""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    SERVER_GENERAL_ERROR = "SERVER_GENERAL_ERROR"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    CAMPAIGN_INVALID_ID = "CAMPAIGN_INVALID_ID"
    CAMPAIGN_INVALID_ROLE = "CAMPAIGN_INVALID_ROLE"
    CAMPAIGN_INVALID_PRIVACY_STATE = "CAMPAIGN_INVALID_PRIVACY_STATE"
    CAMPAIGN_INVALID_RUNNING_STATE = "CAMPAIGN_INVALID_RUNNING_STATE"
    CAMPAIGN_INSUFFICIENT_PERMISSIONS = "CAMPAIGN_INSUFFICIENT_PERMISSIONS"
    CLASS_INVALID_ID = "CLASS_INVALID_ID"
    SERVER_INVALID_DATE = "SERVER_INVALID_DATE"
    SURVEY_INVALID_COLUMN_ID = "SURVEY_INVALID_COLUMN_ID"
    SURVEY_INVALID_LOCATION = "SURVEY_INVALID_LOCATION"
    SURVEY_INVALID_ROW_ORDER = "SURVEY_INVALID_ROW_ORDER"
    USER_INVALID_USERNAME = "USER_INVALID_USERNAME"
    USER_INVALID_FIRST_NAME_VALUE = "USER_INVALID_FIRST_NAME_VALUE"
    USER_INVALID_LAST_NAME_VALUE = "USER_INVALID_LAST_NAME_VALUE"
    USER_INVALID_ORGANIZATION_VALUE = "USER_INVALID_ORGANIZATION_VALUE"
    USER_INVALID_PERSONAL_ID_VALUE = "USER_INVALID_PERSONAL_ID_VALUE"
    USER_INSUFFICIENT_PERMISSIONS = "USER_INSUFFICIENT_PERMISSIONS"
    USER_NOT_IN_CAMPAIGN = "USER_NOT_IN_CAMPAIGN"


class OhmageError(Exception):
    """Base exception for ohmage. Carries an error code and a message safe to show the client."""

    default_code = ErrorCode.SERVER_GENERAL_ERROR

    def __init__(self, message: str, code: ErrorCode | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidArgumentError(OhmageError):
    """Malformed or missing input. The caller's fault; never retried."""


class UnknownEntityError(OhmageError):
    """A referenced campaign, user, class or survey does not exist."""


class InsufficientPermissionsError(OhmageError):
    """Authorization denied. The message names the rule that failed."""

    default_code = ErrorCode.CAMPAIGN_INSUFFICIENT_PERMISSIONS


class AuthenticationError(OhmageError):
    """Credentials missing or mismatched (distinct from a permission denial)."""

    default_code = ErrorCode.AUTHENTICATION_FAILED


class DataAccessError(OhmageError):
    """The backing store failed. The original exception is chained as __cause__."""

    def __init__(self, message: str = "The data store could not be reached."):
        super().__init__(message, ErrorCode.SERVER_GENERAL_ERROR)
