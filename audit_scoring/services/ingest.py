"""
Ingest boundary - Audit Scoring Engine
audit_scoring/services/ingest.py

Parses the JSON audit payload handed over by the host. Nothing raised while
parsing crosses this boundary: malformed payloads are logged and reported as
None (or an empty template).
"""
import json
import logging
from typing import Any, Optional, Union

from pydantic import ValidationError

from audit_scoring.core.exceptions import MalformedAuditDataException
from audit_scoring.models.records import AuditRecord, AuditTemplate

logger = logging.getLogger(__name__)

RawPayload = Union[str, bytes, dict, None]


def _decode(raw: RawPayload, what: str) -> Any:
    if raw is None:
        raise MalformedAuditDataException(f"No {what} provided")
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    if not raw.strip():
        raise MalformedAuditDataException(f"Empty {what} payload")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedAuditDataException(f"Invalid {what} JSON: {e.msg} at position {e.pos}") from e
    if not isinstance(data, dict):
        raise MalformedAuditDataException(f"{what} JSON must be an object")
    return data


def parse_audit_record(raw: RawPayload) -> AuditRecord:
    """Parse an audit payload; raises MalformedAuditDataException."""
    data = _decode(raw, "audit")
    try:
        return AuditRecord.model_validate(data)
    except ValidationError as e:
        raise MalformedAuditDataException(f"Invalid audit record: {e.error_count()} error(s)") from e


def load_audit_record(raw: RawPayload) -> Optional[AuditRecord]:
    """Parse an audit payload, returning None when it is unusable."""
    preview = raw[:200] if isinstance(raw, (str, bytes)) else None
    try:
        record = parse_audit_record(raw)
    except MalformedAuditDataException as e:
        logger.error(f"Failed to load audit data: {e.message}", extra={"preview": preview})
        return None
    logger.info(f"Loaded audit {record.id} with {len(record.questions)} question records")
    return record


def load_audit_template(raw: RawPayload) -> AuditTemplate:
    """Parse an audit template payload; an empty template when absent or invalid."""
    if raw is None:
        return AuditTemplate()
    try:
        data = _decode(raw, "template")
        return AuditTemplate.model_validate(data)
    except MalformedAuditDataException as e:
        logger.warning(f"Ignoring audit template: {e.message}")
    except ValidationError as e:
        logger.warning(f"Ignoring audit template: {e.error_count()} validation error(s)")
    return AuditTemplate()
