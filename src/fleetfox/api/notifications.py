"""Database webhook for finished quality checks."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from pydantic import BaseModel, ValidationError

from fleetfox.domain.quality import QualityCheckResult

if TYPE_CHECKING:
    from fleetfox.containers import AppContainer

router = APIRouter(prefix="/notifications", tags=["notifications"])

logger = logging.getLogger(__name__)


class DatabaseWebhookPayload(BaseModel):
    """Row-change payload sent by Supabase database webhooks."""

    type: str
    table: str
    record: dict[str, object] | None = None
    schema_name: str | None = None


def _get_webhook_secret(request: Request) -> str | None:
    container: AppContainer = request.app.state.container
    return container.settings.notification_webhook_secret


async def require_webhook_secret(
    x_webhook_secret: str | None = Header(default=None),
    webhook_secret: str | None = Depends(_get_webhook_secret),
) -> None:
    """Ensure requests carry the shared secret when one is configured."""
    if webhook_secret and x_webhook_secret != webhook_secret:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.post("/quality-checks", dependencies=[Depends(require_webhook_secret)])
async def quality_check_inserted(
    payload: DatabaseWebhookPayload, request: Request
) -> dict[str, object]:
    """Route a newly stored quality check to subscribed sessions."""
    container: AppContainer = request.app.state.container
    if payload.type != "INSERT" or payload.table != "quality_checks":
        return {"status": "ignored"}
    if payload.record is None:
        return {"status": "ignored"}
    try:
        result = QualityCheckResult.model_validate(payload.record)
    except ValidationError:
        logger.warning("Ignoring malformed quality check row")
        return {"status": "ignored"}
    delivered = container.notification_hub.publish(result)
    logger.info(
        "Quality check completed",
        extra={"task_id": result.task_id, "delivered": delivered},
    )
    return {"status": "ok", "delivered": delivered}
