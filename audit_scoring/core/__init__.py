"""
Core Package - Audit Scoring Engine
audit_scoring/core/__init__.py

Core infrastructure: exceptions, logging.
"""

from audit_scoring.core.exceptions import (
    AuditScoringException,
    ComplianceEvaluationException,
    MalformedAuditDataException,
    SnapshotStoreException,
)
from audit_scoring.core.logging import configure_logging

__all__ = [
    # Exceptions
    "AuditScoringException",
    "ComplianceEvaluationException",
    "MalformedAuditDataException",
    "SnapshotStoreException",
    # Logging
    "configure_logging",
]
