"""Input validation helpers for values forwarded to Salesforce."""
from __future__ import annotations

import re

from .salesforce.exceptions import InvalidRecordId

_RECORD_ID = re.compile(r"^[a-zA-Z0-9]{15}(?:[a-zA-Z0-9]{3})?$")
_SOBJECT_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9_]{0,79}$")


def validate_record_id(raw: str) -> str:
    """Validate a Salesforce record id.

    Args:
        raw: Id taken from the request path

    Returns:
        Stripped record id

    Raises:
        InvalidRecordId: If the id is not 15 or 18 alphanumeric characters
    """
    record_id = (raw or "").strip()
    if not _RECORD_ID.match(record_id):
        raise InvalidRecordId()
    return record_id


def validate_sobject_name(name: str) -> str:
    """Validate an sObject API name (e.g. ``Account``, ``Print_Job__c``).

    Raises:
        ValueError: If the name contains characters Salesforce never uses
    """
    if not _SOBJECT_NAME.match(name or ""):
        raise ValueError(f"Invalid sObject name: {name!r}")
    return name
