# SPDX-License-Identifier: Apache-2.0
"""Campaign roles, campaign states and class roles."""
from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    SUPERVISOR = "supervisor"
    AUTHOR = "author"
    ANALYST = "analyst"
    PARTICIPANT = "participant"


class PrivacyState(str, Enum):
    SHARED = "shared"
    PRIVATE = "private"


class RunningState(str, Enum):
    RUNNING = "running"
    STOPPED = "stopped"


class ClassRole(str, Enum):
    PRIVILEGED = "privileged"
    RESTRICTED = "restricted"


# Roles allowed to manage a campaign's definition, membership and class list.
MANAGING_ROLES = frozenset({Role.SUPERVISOR, Role.AUTHOR})
