from datetime import datetime, timezone
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from audit_scoring.models.records import AuditRecord, AuditTemplate
from audit_scoring.models.tree import Category


class GlobalMetrics(BaseModel):
    """
    Audit-wide values derived from the tree.

    Serialised under the entity column names the host writes back
    (``model_dump(by_alias=True)``).
    """

    model_config = ConfigDict(populate_by_name=True)

    # Coverage ratios, 0-100
    must_have_dog: float = Field(default=0.0, alias="cgi_musthavedog")
    must_have_cat: float = Field(default=0.0, alias="cgi_musthavecat")
    total_must_have: float = Field(default=0.0, alias="cgi_totalmusthave")
    total_dog: float = Field(default=0.0, alias="cgi_totaldog")
    total_cat: float = Field(default=0.0, alias="cgi_totalcat")
    next_best_dog: float = Field(default=0.0, alias="cgi_nextbestdog")
    next_best_cat: float = Field(default=0.0, alias="cgi_nextbestcat")
    total_next_best: float = Field(default=0.0, alias="cgi_totalnextbest")
    other_cat: float = Field(default=0.0, alias="cgi_othercat")
    other_dog: float = Field(default=0.0, alias="cgi_otherdog")

    # Counts of SKU lines answered "Yes"
    dog_dry: int = Field(default=0, alias="cgi_dogdry")
    dog_wet: int = Field(default=0, alias="cgi_dogwet")
    cat_dry: int = Field(default=0, alias="cgi_catdry")
    cat_wet: int = Field(default=0, alias="cgi_catwet")
    cat_reporting_range: int = Field(default=0, alias="cgi_catreportingrange")
    dog_reporting_range: int = Field(default=0, alias="cgi_dogreportingrange")
    cat_territory: int = Field(default=0, alias="cgi_catterritory")
    dog_territory: int = Field(default=0, alias="cgi_dogterritory")

    # Template pass-throughs
    reporting_range: float = Field(default=0.0, alias="cgi_reportingrange")
    territory: float = Field(default=0.0, alias="cgi_territory")

    # Totals
    total_score: float = Field(default=0.0, alias="nov_perfectxscore")
    all_questions_answered: bool = Field(default=False, alias="rc_all_questions_answered")


class ComplianceResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    compliant: bool = Field(default=False, alias="cgi_ultraselectivecompliant")
    online_compliant: bool = Field(default=False, alias="cgi_caonlinecompliant")


class AuditSnapshot(BaseModel):
    """Everything a persistence collaborator needs to restore a session."""

    tree: List[Category] = Field(default_factory=list)
    global_result: AuditRecord = Field(default_factory=AuditRecord)
    global_template: AuditTemplate = Field(default_factory=AuditTemplate)
    template_type: AuditTemplate = Field(default_factory=AuditTemplate)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def audit_id(self) -> str:
        return self.global_result.id or "unknown"


def audit_scores(metrics: GlobalMetrics, compliance: ComplianceResult) -> Dict[str, Any]:
    """Flat entity mapping of every derived audit-level value."""
    scores = metrics.model_dump(by_alias=True)
    scores.update(compliance.model_dump(by_alias=True))
    return scores
