"""Audit scoring engine: questionnaire tree, weighted scores and compliance flags."""

from audit_scoring.services.session import AuditSession

__version__ = "1.0.0"

__all__ = ["AuditSession", "__version__"]
