# SPDX-License-Identifier: Apache-2.0
"""JSON bodies for survey response reads and failures."""
from __future__ import annotations

from ohmage.core.exceptions import OhmageError
from ohmage.services.projection_service import PROMPT_PREFIX, Document


def write_survey_response_document(document: Document, suppress_metadata: bool = False) -> dict:
    """
    {"result": "success", "metadata": {...}, "data": [{column: {"values": [...]}}, ...]}

    Prompt columns also carry a "context" object (label, type, display type, unit).
    """
    data = []
    for column in document.columns:
        entry: dict = {"values": document.values[column]}
        if column.startswith(PROMPT_PREFIX):
            entry = {"context": document.contexts[column].to_dict(), **entry}
        data.append({column: entry})

    body: dict = {"result": "success"}
    if not suppress_metadata:
        body["metadata"] = {
            "number_of_prompts": document.prompt_count,
            "number_of_surveys": document.row_count,
            "items": list(document.columns),
        }
    body["data"] = data
    return body


def write_error(error: OhmageError) -> dict:
    return {"result": "failure", "errors": [{"code": error.code.value, "text": error.message}]}


def write_general_error(error_id: str | None = None) -> dict:
    """Server-side failures never expose internal detail."""
    body: dict = {"result": "failure", "errors": [{"code": "SERVER_GENERAL_ERROR", "text": "Internal server error"}]}
    if error_id:
        body["error_id"] = error_id
    return body
