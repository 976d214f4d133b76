# SPDX-License-Identifier: Apache-2.0
"""
Survey response projection: flat prompt-response rows -> grouped meta-rows -> columns.

Rows arrive ordered by (user, timestamp, survey, prompt). Every row that shares
(login_id, timestamp, survey_id, repeatable_set_id, repeatable_set_iteration) is folded
into one meta-row; each requested column then receives exactly one value per meta-row.
"""
from __future__ import annotations

import json
import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone as dt_timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ohmage.config import LOCATION_STATUS_UNAVAILABLE, NOT_AVAILABLE
from ohmage.core.exceptions import ErrorCode, InvalidArgumentError

logger = logging.getLogger("ohmage.projection")

SPECIAL_ALL = "urn:ohmage:special:all"
CONTEXT_PREFIX = "urn:ohmage:context:"
PROMPT_PREFIX = "urn:ohmage:prompt:id:"

CAMPAIGN_NAME_COLUMN = "urn:ohmage:context:campaign:name"
CAMPAIGN_VERSION_COLUMN = "urn:ohmage:context:campaign:version"

# Context column -> MetaRow attribute
META_ROW_COLUMNS = {
    "urn:ohmage:context:user": "login_id",
    "urn:ohmage:context:client": "client",
    "urn:ohmage:context:timestamp": "timestamp",
    "urn:ohmage:context:timezone": "timezone",
    "urn:ohmage:context:utc_timestamp": "utc_timestamp",
    "urn:ohmage:context:survey_launch_context": "launch_context",
    "urn:ohmage:context:location:status": "location_status",
    "urn:ohmage:context:location:latitude": "latitude",
    "urn:ohmage:context:location:longitude": "longitude",
    "urn:ohmage:context:location:timestamp": "location_timestamp",
    "urn:ohmage:context:location:accuracy": "accuracy",
    "urn:ohmage:context:location:provider": "provider",
    "urn:ohmage:context:repeatable_set:id": "repeatable_set_id",
    "urn:ohmage:context:repeatable_set:iteration": "repeatable_set_iteration",
}
CONTEXT_COLUMNS = frozenset(META_ROW_COLUMNS) | {CAMPAIGN_NAME_COLUMN, CAMPAIGN_VERSION_COLUMN}


@dataclass(frozen=True)
class ResultRow:
    """One prompt response joined with its survey response, as returned by the query layer."""

    login_id: str
    client: str | None
    survey_id: str
    prompt_id: str
    timestamp: str
    timezone: str | None
    display_value: Any
    display_label: str | None = None
    prompt_type: str | None = None
    repeatable_set_id: str | None = None
    repeatable_set_iteration: int | None = None
    location: str | None = None
    location_status: str | None = None
    launch_context: str | None = None
    display_type: str | None = None
    unit: str | None = None

    @property
    def identity(self) -> tuple:
        return (
            self.login_id,
            self.timestamp,
            self.survey_id,
            self.repeatable_set_id,
            self.repeatable_set_iteration,
        )


@dataclass
class PromptContext:
    prompt_id: str
    display_label: str | None = None
    prompt_type: str | None = None
    display_type: str | None = None
    unit: str | None = None

    def to_dict(self) -> dict:
        return {
            "unit": self.unit,
            "prompt_type": self.prompt_type,
            "display_type": self.display_type,
            "display_label": self.display_label,
        }


@dataclass
class MetaRow:
    login_id: str
    survey_id: str
    timestamp: str
    timezone: str | None
    utc_timestamp: str | None
    client: str | None
    launch_context: str | None
    location_status: str | None
    repeatable_set_id: str | None
    repeatable_set_iteration: int | None
    latitude: float | None = None
    longitude: float | None = None
    accuracy: float | None = None
    provider: str | None = None
    location_timestamp: str | None = None
    prompt_values: dict[str, Any] = field(default_factory=dict)

    @property
    def identity(self) -> tuple:
        return (
            self.login_id,
            self.timestamp,
            self.survey_id,
            self.repeatable_set_id,
            self.repeatable_set_iteration,
        )


@dataclass
class Document:
    """Column-oriented projection result. values[c] has row_count entries for every column c."""

    columns: list[str]
    contexts: dict[str, PromptContext]
    values: dict[str, list]
    row_count: int
    prompt_count: int = 0


def _opt_float(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def _opt_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def parse_location(raw: str) -> dict:
    """Flatten the stored location JSON. Raises InvalidArgumentError if it is not a JSON object."""
    try:
        obj = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"The location is not valid JSON: {e}", ErrorCode.SURVEY_INVALID_LOCATION) from e
    if not isinstance(obj, dict):
        raise InvalidArgumentError("The location is not a JSON object.", ErrorCode.SURVEY_INVALID_LOCATION)
    return {
        "accuracy": _opt_float(obj.get("accuracy")),
        "latitude": _opt_float(obj.get("latitude")),
        "longitude": _opt_float(obj.get("longitude")),
        "provider": _opt_str(obj.get("provider")),
        "location_timestamp": _opt_str(obj.get("timestamp")),
    }


def to_utc_timestamp(timestamp: str, tz_name: str | None) -> str | None:
    """Local device time in tz_name -> 'YYYY-MM-DD HH:MM:SS' in UTC. None when either part is unusable."""
    try:
        local = datetime.fromisoformat(timestamp)
    except (TypeError, ValueError):
        logger.warning("Unparsable survey timestamp %r", timestamp)
        return None
    if local.tzinfo is None:
        try:
            local = local.replace(tzinfo=ZoneInfo(tz_name) if tz_name else dt_timezone.utc)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown timezone %r for timestamp %s", tz_name, timestamp)
            return None
    return local.astimezone(dt_timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def _as_prompt_column(prompt_id: str) -> str:
    return prompt_id if prompt_id.startswith(PROMPT_PREFIX) else PROMPT_PREFIX + prompt_id


def resolve_columns(requested_columns: Sequence[str] | None, declared_all_columns: Sequence[str]) -> list[str]:
    """Expand the 'all' sentinel, drop duplicates and reject unknown context columns."""
    if requested_columns and requested_columns[0] == SPECIAL_ALL:
        columns = list(declared_all_columns)
    else:
        columns = list(requested_columns or [])
    for column in columns:
        if column not in CONTEXT_COLUMNS and not column.startswith(PROMPT_PREFIX):
            raise InvalidArgumentError(f"Unknown column: {column}", ErrorCode.SURVEY_INVALID_COLUMN_ID)
    return list(dict.fromkeys(columns))


def resolve_prompt_columns(
    rows: Sequence[ResultRow],
    requested_prompt_ids: Sequence[str] | None,
    requested_survey_ids: Sequence[str] | None,
) -> list[str]:
    """
    Survey scope (or the 'all' prompt sentinel) means every prompt that actually occurs in
    the rows, in first-seen order. Otherwise the requested prompt ids are used as given.
    """
    if requested_survey_ids is not None or (requested_prompt_ids and requested_prompt_ids[0] == SPECIAL_ALL):
        return list(dict.fromkeys(PROMPT_PREFIX + row.prompt_id for row in rows))
    return [_as_prompt_column(p) for p in requested_prompt_ids or []]


def _open_meta_row(row: ResultRow) -> MetaRow:
    meta = MetaRow(
        login_id=row.login_id,
        survey_id=row.survey_id,
        timestamp=row.timestamp,
        timezone=row.timezone,
        utc_timestamp=to_utc_timestamp(row.timestamp, row.timezone),
        client=row.client,
        launch_context=row.launch_context,
        location_status=row.location_status,
        repeatable_set_id=row.repeatable_set_id,
        repeatable_set_iteration=row.repeatable_set_iteration,
    )
    if row.location_status != LOCATION_STATUS_UNAVAILABLE and row.location is not None:
        try:
            location = parse_location(row.location)
        except InvalidArgumentError as e:
            logger.warning("Dropping location for %s at %s: %s", row.login_id, row.timestamp, e.message)
        else:
            meta.latitude = location["latitude"]
            meta.longitude = location["longitude"]
            meta.accuracy = location["accuracy"]
            meta.provider = location["provider"]
            meta.location_timestamp = location["location_timestamp"]
    return meta


def _record(meta: MetaRow, row: ResultRow, contexts: dict[str, PromptContext]) -> None:
    meta.prompt_values[row.prompt_id] = row.display_value
    if row.prompt_id not in contexts:
        contexts[row.prompt_id] = PromptContext(
            prompt_id=row.prompt_id,
            display_label=row.display_label,
            prompt_type=row.prompt_type,
            display_type=row.display_type,
            unit=row.unit,
        )


def group_rows(
    rows: Sequence[ResultRow], enforce_grouping: bool = True
) -> tuple[list[MetaRow], dict[str, PromptContext]]:
    """
    Single forward pass folding rows into meta-rows. Works on a private copy; the
    caller's sequence is left untouched.

    With enforce_grouping, an identity that reappears after its meta-row was closed
    raises InvalidArgumentError instead of silently producing a second meta-row. Only
    contiguity of each identity is checked, not a non-decreasing order of identities:
    rows grouped in any order still fold correctly.
    """
    remaining = list(rows)
    contexts: dict[str, PromptContext] = {}
    if not remaining:
        return [], contexts

    first = remaining.pop(0)
    current = _open_meta_row(first)
    _record(current, first, contexts)
    meta_rows = [current]
    closed: set[tuple] = set()

    for row in remaining:
        if row.identity != current.identity:
            closed.add(current.identity)
            if enforce_grouping and row.identity in closed:
                raise InvalidArgumentError(
                    f"Result rows are not grouped by user, timestamp and survey: {row.identity!r} reappeared.",
                    ErrorCode.SURVEY_INVALID_ROW_ORDER,
                )
            current = _open_meta_row(row)
            meta_rows.append(current)
        _record(current, row, contexts)

    return meta_rows, contexts


def _column_value(column: str, meta: MetaRow, campaign_name: str | None, campaign_version: str | None) -> Any:
    if column.startswith(PROMPT_PREFIX):
        value = meta.prompt_values.get(column[len(PROMPT_PREFIX):])
        return NOT_AVAILABLE if value is None else value
    if column == CAMPAIGN_NAME_COLUMN:
        return campaign_name
    if column == CAMPAIGN_VERSION_COLUMN:
        return campaign_version
    return getattr(meta, META_ROW_COLUMNS[column])


def project(
    rows: Sequence[ResultRow],
    requested_columns: Sequence[str] | None,
    requested_prompt_ids: Sequence[str] | None,
    requested_survey_ids: Sequence[str] | None,
    declared_all_columns: Sequence[str],
    campaign_name: str | None,
    campaign_version: str | None,
    enforce_grouping: bool = True,
) -> Document:
    columns = resolve_columns(requested_columns, declared_all_columns)
    for prompt_column in resolve_prompt_columns(rows, requested_prompt_ids, requested_survey_ids):
        if prompt_column not in columns:
            columns.append(prompt_column)

    logger.info("Projecting %d result rows into %d columns.", len(rows), len(columns))
    meta_rows, seen_contexts = group_rows(rows, enforce_grouping=enforce_grouping)

    values: dict[str, list] = {column: [] for column in columns}
    for meta in meta_rows:
        for column in columns:
            values[column].append(_column_value(column, meta, campaign_name, campaign_version))

    contexts = {}
    for column in columns:
        if column.startswith(PROMPT_PREFIX):
            prompt_id = column[len(PROMPT_PREFIX):]
            contexts[column] = seen_contexts.get(prompt_id) or PromptContext(prompt_id=prompt_id)

    return Document(
        columns=columns,
        contexts=contexts,
        values=values,
        row_count=len(meta_rows),
        prompt_count=len(rows),
    )
