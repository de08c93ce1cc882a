"""Interpretation of workflow webhook responses.

The webhook body is not contractually fixed, so a response is run through an
ordered list of decoders. The first decoder that claims the payload decides
the outcome:

1. explicit error signals (``error``, ``workflow_error``, ``status == "error"``
   or ``failed is True``) become ``WorkflowError``;
2. a recognised verdict under ``status`` or ``overall_status`` becomes
   ``Resolved``;
3. anything else that parsed becomes ``Accepted``.

A verdict of ``pass`` that still carries issues is reported as
``review_needed``. The upstream workflow has been seen returning exactly that
combination; the downgrade is a compatibility shim, not a guarantee that the
issue list is the more accurate of the two fields.
"""

import json
import logging
from collections.abc import Callable, Mapping

from pydantic import ValidationError

from fleetfox.domain.outcomes import (
    Accepted,
    Pending,
    QualityStatus,
    Resolved,
    SubmissionOutcome,
    TransportError,
    TransportErrorKind,
    WorkflowError,
)
from fleetfox.domain.quality import QualityIssue

DEFAULT_WORKFLOW_ERROR = "Workflow execution failed"

logger = logging.getLogger(__name__)

PayloadDecoder = Callable[[Mapping[str, object]], SubmissionOutcome | None]


def interpret_response(
    status_code: int, content_type: str, body: str
) -> SubmissionOutcome:
    """Classify a completed webhook response."""
    if not 200 <= status_code < 300:  # noqa: PLR2004
        logger.error(
            "Webhook returned an error status",
            extra={"status_code": status_code, "body": body[:500]},
        )
        return TransportError(
            kind=TransportErrorKind.HTTP_STATUS,
            status_code=status_code,
            message=f"HTTP {status_code}",
            body=body,
        )

    text = body.strip()
    if not text:
        return Pending()
    if "application/json" not in content_type.lower() and not text.startswith("{"):
        logger.info("Webhook returned a non-JSON body", extra={"body": text[:200]})
        return Pending()

    try:
        parsed = json.loads(text)
    except ValueError:
        logger.warning("Could not parse webhook response", extra={"body": text[:200]})
        return Accepted(raw_response=body)
    if not isinstance(parsed, dict):
        return Accepted(raw_response=parsed)
    return decode_payload(parsed)


def decode_payload(payload: Mapping[str, object]) -> SubmissionOutcome:
    """Run the ordered decoders over a parsed JSON object."""
    for decoder in _DECODERS:
        outcome = decoder(payload)
        if outcome is not None:
            return outcome
    return Accepted(raw_response=dict(payload))


def decode_workflow_error(payload: Mapping[str, object]) -> WorkflowError | None:
    """Return a ``WorkflowError`` when the payload signals a failure."""
    signalled = (
        _truthy(payload.get("error"))
        or _truthy(payload.get("workflow_error"))
        or payload.get("status") == "error"
        or payload.get("failed") is True
    )
    if not signalled:
        return None
    message = _first_text(payload, "error_message", "error", "message")
    node = _first_text(payload, "error_node", "failed_node")
    details = _first_text(payload, "error_details", "details")
    return WorkflowError(
        message=message or DEFAULT_WORKFLOW_ERROR,
        node=node,
        details=details,
    )


def decode_verdict(payload: Mapping[str, object]) -> Resolved | None:
    """Return a ``Resolved`` outcome for a recognised status value."""
    raw_status = payload.get("status") or payload.get("overall_status")
    try:
        reported = QualityStatus(str(raw_status))
    except ValueError:
        return None

    issues = _parse_issues(payload.get("issues") or payload.get("all_issues"))
    total_issues = _as_int(payload.get("total_issues")) or 0
    status = reported
    if reported is QualityStatus.PASS and (issues or total_issues > 0):
        logger.warning(
            "Workflow returned pass with issues; reporting review_needed",
            extra={"total_issues": total_issues, "issue_count": len(issues)},
        )
        status = QualityStatus.REVIEW_NEEDED

    return Resolved(
        status=status,
        total_issues=total_issues,
        issues=issues,
        feedback_text=_first_text(payload, "feedback", "feedback_text") or "",
        processing_time_seconds=_as_float(payload.get("processing_time_seconds")),
        images_analyzed=_as_int(payload.get("images_analyzed")),
        images_passed=_as_int(payload.get("images_passed")),
        images_failed=_as_int(payload.get("images_failed")),
        reported_status=reported,
    )


_DECODERS: tuple[PayloadDecoder, ...] = (decode_workflow_error, decode_verdict)


def _parse_issues(raw: object) -> list[QualityIssue]:
    if not isinstance(raw, list):
        return []
    issues: list[QualityIssue] = []
    for item in raw:
        if isinstance(item, str):
            issues.append(QualityIssue(description=item))
            continue
        try:
            issues.append(QualityIssue.model_validate(item))
        except ValidationError:
            issues.append(QualityIssue(description=str(item)))
    return issues


def _truthy(value: object) -> bool:
    # empty objects and arrays still count as set
    return value not in (None, False, "", 0)


def _first_text(payload: Mapping[str, object], *keys: str) -> str | None:
    for key in keys:
        value = payload.get(key)
        if not _truthy(value) or value is True:
            continue
        if isinstance(value, str):
            return value
        if isinstance(value, dict | list):
            if not value:
                continue
            return json.dumps(value)
        return str(value)
    return None


def _as_int(value: object) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value))
        except ValueError:
            return None
    return None


def _as_float(value: object) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0
