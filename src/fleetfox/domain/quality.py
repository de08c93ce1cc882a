"""Models for quality-check verdicts reported by the workflow."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

CRITICAL_SEVERITY = 7
MODERATE_SEVERITY = 4


class QualityIssue(BaseModel):
    """Single issue detected on a photo."""

    model_config = ConfigDict(extra="allow")

    type: str | None = Field(
        default=None, validation_alias=AliasChoices("type", "dirt_category")
    )
    location: str | None = None
    description: str | None = None
    severity: float | None = Field(
        default=None, validation_alias=AliasChoices("severity", "confidence")
    )

    @field_validator("severity", mode="before")
    @classmethod
    def _coerce_severity(cls, value: object) -> float | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, int | float):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return None
        return None

    @property
    def severity_bucket(self) -> str:
        """Return critical, moderate or minor."""
        if self.severity is None:
            return "minor"
        if self.severity >= CRITICAL_SEVERITY:
            return "critical"
        if self.severity >= MODERATE_SEVERITY:
            return "moderate"
        return "minor"


class QualityCheckResult(BaseModel):
    """Row pushed when the workflow stores a finished quality check."""

    model_config = ConfigDict(extra="allow")

    task_id: str
    overall_status: str
    total_issues: int = 0
    critical_issues_count: int = 0
    minor_issues_count: int = 0
    feedback_text: str | None = None
    processing_time_seconds: float | None = None
    client_id: str | None = None
    vehicle_id: str | None = None
    fox_id: str | None = None

    @field_validator(
        "total_issues", "critical_issues_count", "minor_issues_count", mode="before"
    )
    @classmethod
    def _null_count_is_zero(cls, value: object) -> object:
        return 0 if value is None else value
