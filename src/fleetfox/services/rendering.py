"""Result views for submission outcomes."""

from dataclasses import dataclass, field

from fleetfox.domain.outcomes import (
    Accepted,
    ConfigurationError,
    Pending,
    QualityStatus,
    Resolved,
    SubmissionOutcome,
    TransportError,
    TransportErrorKind,
    WorkflowError,
)
from fleetfox.domain.quality import QualityIssue
from fleetfox.domain.slots import REQUIRED_SLOTS, format_identifier

_NOTIFY_NOTICE = (
    "You'll receive a real-time notification when the AI analysis is complete "
    "(1-2 minutes)."
)

_TRANSPORT_MESSAGES = {
    TransportErrorKind.TIMEOUT: (
        "Request timed out. The webhook took too long to respond.",
        "This usually means the workflow is not responding or is overloaded.",
    ),
    TransportErrorKind.NETWORK_UNREACHABLE: (
        "Network error: Could not reach webhook.",
        "The workflow may be down, the webhook URL may be wrong, "
        "or the network may be blocking the request.",
    ),
    TransportErrorKind.CORS: (
        "CORS error: the request was blocked.",
        "The workflow must allow requests from this domain.",
    ),
}


@dataclass(frozen=True)
class IssueView:
    """Display form of a detected issue."""

    type: str
    location: str
    description: str
    severity: float | None
    severity_bucket: str


@dataclass(frozen=True)
class ResultView:
    """What the result panel shows."""

    tone: str
    headline: str
    summary: str | None = None
    notice: str | None = None
    details: list[str] = field(default_factory=list)
    issues: list[IssueView] = field(default_factory=list)
    feedback: str | None = None
    processing_time_seconds: float | None = None
    images_analyzed: int | None = None
    images_passed: int | None = None
    images_failed: int | None = None
    task_id: str | None = None
    can_retry: bool = False


def render_missing_slots(missing_names: list[str]) -> ResultView:
    """View for a submission attempted with unfilled slots."""
    return ResultView(
        tone="fail",
        headline="Missing Required Photos",
        summary=(
            f"Please upload all {len(REQUIRED_SLOTS)} required photos "
            "before submitting:"
        ),
        details=[f"Missing: {', '.join(missing_names)}"],
        can_retry=True,
    )


def render_submitting() -> ResultView:
    """View shown while a batch is in flight."""
    return ResultView(
        tone="processing",
        headline="Processing Quality Check...",
        summary="You'll receive a notification when complete!",
    )


def render_outcome(  # noqa: PLR0911
    outcome: SubmissionOutcome, task_id: str | None
) -> ResultView:
    """Render any outcome; the push and synchronous paths both end here."""
    if isinstance(outcome, Resolved):
        return _render_resolved(outcome, task_id)
    if isinstance(outcome, Accepted):
        raw = outcome.raw_response
        message = raw.get("message") if isinstance(raw, dict) else None
        return ResultView(
            tone="success",
            headline="Photos Submitted!",
            summary=str(message) if message else "Quality check is processing...",
            notice=_NOTIFY_NOTICE,
            task_id=task_id,
        )
    if isinstance(outcome, Pending):
        return ResultView(
            tone="processing",
            headline="Photos Submitted!",
            summary="Quality check is processing...",
            notice=_NOTIFY_NOTICE,
            details=[
                "If you don't receive a notification within 3 minutes, "
                "try resubmitting."
            ],
            task_id=task_id,
        )
    if isinstance(outcome, WorkflowError):
        details = []
        if outcome.node:
            details.append(f"Failed in node: {outcome.node}")
        if outcome.details:
            details.append(outcome.details)
        return ResultView(
            tone="fail",
            headline="Quality Check Failed",
            summary=f"Workflow Error: {outcome.message}",
            notice=(
                "The workflow encountered an error. "
                "Please try again in a few moments."
            ),
            details=details,
            task_id=task_id,
            can_retry=True,
        )
    if isinstance(outcome, TransportError):
        return _render_transport_error(outcome, task_id)
    if isinstance(outcome, ConfigurationError):
        return ResultView(
            tone="fail",
            headline="Configuration Error",
            summary=outcome.message,
            details=[outcome.details] if outcome.details else [],
            can_retry=True,
        )
    raise TypeError(f"Unsupported outcome: {outcome!r}")


def _render_resolved(outcome: Resolved, task_id: str | None) -> ResultView:
    count = outcome.total_issues or len(outcome.issues) or "Multiple"
    if outcome.status is QualityStatus.PASS:
        return ResultView(
            tone="success",
            headline="Quality Check: PASSED",
            summary="Great job! All photos look clean.",
            processing_time_seconds=outcome.processing_time_seconds or None,
            images_analyzed=outcome.images_analyzed,
            images_passed=outcome.images_passed,
            images_failed=outcome.images_failed,
            task_id=task_id,
        )
    if outcome.status is QualityStatus.REVIEW_NEEDED:
        tone = "review"
        headline = "Quality Check: REVIEW NEEDED"
        summary = f"Issues Found: {count}"
        notice = "Manual review required. Please address the issues below and resubmit."
    else:
        tone = "fail"
        headline = "Quality Check: FAILED"
        summary = f"Critical Issues Found: {count}"
        notice = (
            "Action Required: Critical issues detected. "
            "Please address immediately and resubmit."
        )
    return ResultView(
        tone=tone,
        headline=headline,
        summary=summary,
        notice=notice,
        issues=[_issue_view(issue) for issue in outcome.issues],
        feedback=outcome.feedback_text or None,
        processing_time_seconds=outcome.processing_time_seconds or None,
        images_analyzed=outcome.images_analyzed,
        images_passed=outcome.images_passed,
        images_failed=outcome.images_failed,
        task_id=task_id,
    )


def _render_transport_error(outcome: TransportError, task_id: str | None) -> ResultView:
    if outcome.kind is TransportErrorKind.HTTP_STATUS:
        message, hint = f"HTTP {outcome.status_code}", None
    else:
        message, hint = _TRANSPORT_MESSAGES[outcome.kind]
    details = [f"Error: {message}"]
    if hint:
        details.append(hint)
    return ResultView(
        tone="fail",
        headline="Submission Failed",
        summary="Failed to submit photos. Please try again.",
        details=details,
        task_id=task_id,
        can_retry=True,
    )


def _issue_view(issue: QualityIssue) -> IssueView:
    return IssueView(
        type=format_identifier(issue.type or "issue"),
        location=format_identifier(issue.location or "unknown_location"),
        description=issue.description or issue.location or "Issue detected",
        severity=issue.severity,
        severity_bucket=issue.severity_bucket,
    )
