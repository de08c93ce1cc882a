"""Presentation state machine for submissions and pushed verdicts."""

import logging
from dataclasses import dataclass, field
from enum import StrEnum

from fleetfox.domain.outcomes import (
    Accepted,
    MissingSlotsError,
    Pending,
    Resolved,
    SubmissionInProgressError,
    SubmissionOutcome,
)
from fleetfox.domain.quality import QualityCheckResult
from fleetfox.domain.submissions import (
    DEFAULT_VEHICLE_ID,
    SubmissionBatch,
    SubmissionMetadata,
)
from fleetfox.services.identifiers import generate_simple_id
from fleetfox.services.rendering import (
    ResultView,
    render_missing_slots,
    render_outcome,
    render_submitting,
)
from fleetfox.services.responses import decode_verdict
from fleetfox.services.slot_store import SlotStore
from fleetfox.services.submissions import SubmissionCoordinator

logger = logging.getLogger(__name__)


class ReconcilerState(StrEnum):
    """States of the result panel."""

    IDLE = "idle"
    VALIDATING = "validating"
    AWAITING_COMPLETION = "awaiting_completion"
    SUBMITTING = "submitting"
    RESOLVED = "resolved"
    ACCEPTED = "accepted"
    PENDING = "pending"
    ERRORED = "errored"


@dataclass
class SessionIdentifiers:
    """Task and fox ids pre-filled for the next submission."""

    task_id: str
    fox_id: str

    @classmethod
    def generate(cls) -> "SessionIdentifiers":
        """Create a fresh pair of identifiers."""
        return cls(task_id=generate_simple_id("TASK"), fox_id=generate_simple_id("FOX"))


@dataclass
class PresentationReconciler:
    """Maps submission outcomes and pushed verdicts onto the result panel."""

    store: SlotStore
    coordinator: SubmissionCoordinator
    identifiers: SessionIdentifiers = field(default_factory=SessionIdentifiers.generate)
    state: ReconcilerState = ReconcilerState.IDLE
    view: ResultView | None = None
    outcome: SubmissionOutcome | None = None
    missing_names: list[str] = field(default_factory=list)
    submitted_batch: SubmissionBatch | None = None
    _held_verdict: Resolved | None = field(default=None, init=False)

    @property
    def submit_enabled(self) -> bool:
        """The submit control is disabled while a batch is in flight."""
        return self.state is not ReconcilerState.SUBMITTING

    async def submit(  # noqa: PLR0913
        self,
        client_id: str,
        vehicle_id: str | None = None,
        task_id: str | None = None,
        fox_id: str | None = None,
        user_id: str | None = None,
    ) -> ResultView:
        """Validate and send the current session; returns the view to show."""
        if self.state is ReconcilerState.SUBMITTING:
            raise SubmissionInProgressError("A submission is already in progress")

        self.state = ReconcilerState.VALIDATING
        metadata = SubmissionMetadata(
            task_id=task_id or self.identifiers.task_id,
            fox_id=fox_id or self.identifiers.fox_id,
            client_id=client_id,
            vehicle_id=vehicle_id or DEFAULT_VEHICLE_ID,
        )
        try:
            batch = self.coordinator.build_batch(self.store, metadata, user_id)
        except MissingSlotsError as exc:
            self.state = ReconcilerState.AWAITING_COMPLETION
            self.missing_names = exc.missing_names
            self.view = render_missing_slots(exc.missing_names)
            return self.view

        self.missing_names = []
        self.submitted_batch = batch
        self._held_verdict = None
        self.state = ReconcilerState.SUBMITTING
        self.view = render_submitting()
        try:
            outcome = await self.coordinator.dispatch(batch)
            self._apply(outcome, batch.task_id)
        except Exception:
            self._show_submit_failure(batch.task_id)
            raise
        finally:
            # a cancelled call must not leave the submit control disabled
            if self.state is ReconcilerState.SUBMITTING:
                self._show_submit_failure(batch.task_id)
        return self.view

    def on_notification(self, result: QualityCheckResult) -> bool:
        """Apply a pushed verdict; return True when the panel changed.

        The push can arrive before, during or after the submission call. A
        verdict for the in-flight task is held until the call returns.
        """
        batch = self.submitted_batch
        if batch is None or result.task_id != batch.task_id:
            return False
        verdict = decode_verdict(result.model_dump())
        if verdict is None:
            logger.warning(
                "Ignoring notification with unknown status",
                extra={"task_id": result.task_id, "status": result.overall_status},
            )
            return False
        if self.state is ReconcilerState.SUBMITTING:
            self._held_verdict = verdict
            return False
        if self.state is not ReconcilerState.PENDING:
            return False
        self._show_resolved(verdict, batch.task_id)
        return True

    def _show_submit_failure(self, task_id: str) -> None:
        self.state = ReconcilerState.ERRORED
        self.view = ResultView(
            tone="fail",
            headline="Submission Failed",
            summary="Failed to submit photos. Please try again.",
            task_id=task_id,
            can_retry=True,
        )

    def _apply(self, outcome: SubmissionOutcome, task_id: str) -> None:
        self.outcome = outcome
        self.view = render_outcome(outcome, task_id)
        if isinstance(outcome, Resolved):
            self.state = ReconcilerState.RESOLVED
        elif isinstance(outcome, Accepted):
            self.state = ReconcilerState.ACCEPTED
        elif isinstance(outcome, Pending):
            self.state = ReconcilerState.PENDING
        else:
            self.state = ReconcilerState.ERRORED
            return

        self.store.clear()
        self.identifiers = SessionIdentifiers.generate()
        if self.state is ReconcilerState.PENDING and self._held_verdict is not None:
            self._show_resolved(self._held_verdict, task_id)

    def _show_resolved(self, verdict: Resolved, task_id: str) -> None:
        self._held_verdict = None
        self.outcome = verdict
        self.view = render_outcome(verdict, task_id)
        self.state = ReconcilerState.RESOLVED
