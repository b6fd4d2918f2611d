"""
Custom Exceptions - Audit Scoring Engine
audit_scoring/core/exceptions.py

Raised at internal seams; the ingest boundary, the mutation API and the
compliance evaluator catch them and degrade to a well-defined default.
"""


class AuditScoringException(Exception):
    """Base exception for the scoring engine."""

    pass


class MalformedAuditDataException(AuditScoringException):
    """Audit payload could not be parsed into an audit record."""

    def __init__(self, message: str = "Malformed audit data"):
        self.message = message
        super().__init__(message)


class SnapshotStoreException(AuditScoringException):
    """Snapshot could not be written to or read from its store."""

    def __init__(self, backend: str, audit_id: str, reason: str):
        self.backend = backend
        self.audit_id = audit_id
        self.reason = reason
        super().__init__(f"{backend} snapshot store failed for audit {audit_id}: {reason}")


class ComplianceEvaluationException(AuditScoringException):
    """Tree walk failed while evaluating compliance."""

    def __init__(self, question_id: str, reason: str):
        self.question_id = question_id
        self.reason = reason
        super().__init__(f"Compliance evaluation failed at question {question_id}: {reason}")
