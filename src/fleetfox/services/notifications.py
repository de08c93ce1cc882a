"""Delivery of pushed quality-check results to sessions."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum

from fleetfox.domain.quality import QualityCheckResult

logger = logging.getLogger(__name__)

NotificationCallback = Callable[[QualityCheckResult], None]


class Role(StrEnum):
    """User roles stored alongside identities."""

    FOX = "fox"
    CLIENT = "client"
    ADMIN = "admin"


@dataclass(frozen=True)
class NotificationBanner:
    """Short in-app message for a finished quality check."""

    title: str
    message: str
    task_id: str


@dataclass(frozen=True)
class Subscription:
    """A session's registration for pushed results."""

    callback: NotificationCallback
    role: Role
    user_id: str | None = None
    client_id: str | None = None

    def matches(self, result: QualityCheckResult) -> bool:
        """Whether the result is visible to this subscriber."""
        if self.role is Role.ADMIN:
            return True
        if self.role is Role.CLIENT:
            return self.client_id is not None and result.client_id == self.client_id
        return self.user_id is not None and result.fox_id == self.user_id


@dataclass
class NotificationHub:
    """Routes pushed results to at most one callback per session."""

    _subscriptions: dict[str, Subscription] = field(default_factory=dict)

    def subscribe(  # noqa: PLR0913
        self,
        session_key: str,
        callback: NotificationCallback,
        role: Role = Role.FOX,
        user_id: str | None = None,
        client_id: str | None = None,
    ) -> None:
        """Register a session's callback, replacing any earlier one."""
        self._subscriptions[session_key] = Subscription(
            callback=callback, role=role, user_id=user_id, client_id=client_id
        )
        logger.info(
            "Subscribed to quality check results",
            extra={"session_key": session_key, "role": role.value},
        )

    def unsubscribe(self, session_key: str) -> None:
        """Remove a session's callback, if any."""
        self._subscriptions.pop(session_key, None)

    def is_subscribed(self, session_key: str) -> bool:
        """Whether a session currently has a callback registered."""
        return session_key in self._subscriptions

    def publish(self, result: QualityCheckResult) -> int:
        """Deliver a result to every matching session; return the count."""
        delivered = 0
        for session_key, subscription in list(self._subscriptions.items()):
            if not subscription.matches(result):
                continue
            try:
                subscription.callback(result)
            except Exception:
                logger.exception(
                    "Notification callback failed",
                    extra={"session_key": session_key, "task_id": result.task_id},
                )
                continue
            delivered += 1
        return delivered


def build_banner(result: QualityCheckResult) -> NotificationBanner:
    """Build the in-app banner for a finished quality check."""
    if result.overall_status == "pass":
        return NotificationBanner(
            title="Quality Check PASSED",
            message="All photos look clean! Great job!",
            task_id=result.task_id,
        )
    return NotificationBanner(
        title="Quality Check FAILED",
        message=f"Found {result.total_issues} issues. Action needed.",
        task_id=result.task_id,
    )
