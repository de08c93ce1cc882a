"""Submission outcomes and submission-level errors."""

from dataclasses import dataclass, field
from enum import StrEnum

from fleetfox.domain.quality import QualityIssue
from fleetfox.domain.slots import PhotoSlot


class QualityStatus(StrEnum):
    """Verdicts the external workflow can return."""

    PASS = "pass"
    FAIL = "fail"
    REVIEW_NEEDED = "review_needed"


class TransportErrorKind(StrEnum):
    """Classification of failed webhook deliveries."""

    TIMEOUT = "timeout"
    NETWORK_UNREACHABLE = "network_unreachable"
    CORS = "cors"
    HTTP_STATUS = "http_status"


@dataclass(frozen=True)
class Pending:
    """No interpretable response; the workflow is still processing."""


@dataclass(frozen=True)
class Accepted:
    """The webhook acknowledged the batch with an unrecognized body."""

    raw_response: object


@dataclass(frozen=True)
class Resolved:
    """A verdict the workflow reported, after the pass-with-issues shim."""

    status: QualityStatus
    total_issues: int = 0
    issues: list[QualityIssue] = field(default_factory=list)
    feedback_text: str = ""
    processing_time_seconds: float = 0.0
    images_analyzed: int | None = None
    images_passed: int | None = None
    images_failed: int | None = None
    reported_status: QualityStatus | None = None

    @property
    def status_overridden(self) -> bool:
        """Whether the reported status was downgraded."""
        return self.reported_status is not None and self.reported_status != self.status


@dataclass(frozen=True)
class WorkflowError:
    """The workflow signalled an explicit failure."""

    message: str
    node: str | None = None
    details: str | None = None


@dataclass(frozen=True)
class TransportError:
    """The batch could not be delivered or the webhook rejected it."""

    kind: TransportErrorKind
    status_code: int | None = None
    message: str = ""
    body: str | None = None


@dataclass(frozen=True)
class ConfigurationError:
    """The destination could not be resolved or is not allowed."""

    message: str
    details: str | None = None


SubmissionOutcome = (
    Pending | Accepted | Resolved | WorkflowError | TransportError | ConfigurationError
)


class MissingSlotsError(Exception):
    """Raised when a submission is attempted with unfilled slots."""

    def __init__(self, missing: list[PhotoSlot]) -> None:
        self.missing = missing
        self.missing_names = [slot.display_name for slot in missing]
        super().__init__(f"Missing: {', '.join(self.missing_names)}")


class SubmissionInProgressError(Exception):
    """Raised when a second submission starts while one is in flight."""


class WebhookTransportError(Exception):
    """Raised by webhook adapters when a request fails below HTTP."""

    def __init__(self, kind: TransportErrorKind, message: str) -> None:
        self.kind = kind
        super().__init__(message)
