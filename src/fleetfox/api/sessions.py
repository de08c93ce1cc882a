"""Upload session endpoints."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Path, Request, status
from pydantic import BaseModel

from fleetfox.domain.outcomes import SubmissionInProgressError
from fleetfox.domain.slots import PhotoSlot, parse_slot
from fleetfox.services.identity import Identity
from fleetfox.services.sessions import PROFILE_ID_PATTERN, UploadSessionManager

if TYPE_CHECKING:
    from fleetfox.containers import AppContainer

router = APIRouter(prefix="/sessions", tags=["sessions"])


class SubmitRequest(BaseModel):
    """Form values entered alongside the photos."""

    client_id: str
    vehicle_id: str | None = None
    task_id: str | None = None
    fox_id: str | None = None


async def _get_session(
    request: Request,
    profile_id: str = Path(pattern=PROFILE_ID_PATTERN),
) -> UploadSessionManager:
    container: AppContainer = request.app.state.container
    return container.session_registry.get(profile_id)


def _get_identity(
    request: Request, authorization: str | None = Header(default=None)
) -> Identity:
    container: AppContainer = request.app.state.container
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[len("bearer ") :].strip()
    return container.identity_service.resolve(token)


def _require_slot(slot: str) -> PhotoSlot:
    parsed = parse_slot(slot)
    if parsed is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Unknown slot"
        )
    return parsed


@router.get("/{profile_id}")
async def get_session(
    session: UploadSessionManager = Depends(_get_session),
    identity: Identity = Depends(_get_identity),
) -> dict[str, object]:
    """Return the current session state."""
    session.attach(identity)
    return session.snapshot()


@router.post("/{profile_id}/restore")
async def restore_session(
    session: UploadSessionManager = Depends(_get_session),
) -> dict[str, object]:
    """Reload persisted slots and start verifying them."""
    restored = session.restore()
    snapshot = session.snapshot()
    snapshot["restored"] = [slot.value for slot in restored]
    return snapshot


@router.put("/{profile_id}/slots/{slot}")
async def upload_slot(
    slot: str,
    request: Request,
    session: UploadSessionManager = Depends(_get_session),
    identity: Identity = Depends(_get_identity),
) -> dict[str, object]:
    """Upload the raw image body into a slot."""
    photo_slot = _require_slot(slot)
    content = await request.body()
    if not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Empty image upload"
        )
    record = await session.upload(photo_slot, content, identity)
    return {"record": record.model_dump(mode="json"), "session": session.snapshot()}


@router.delete("/{profile_id}/slots/{slot}")
async def remove_slot(
    slot: str,
    session: UploadSessionManager = Depends(_get_session),
) -> dict[str, object]:
    """Empty a slot."""
    session.remove(_require_slot(slot))
    return session.snapshot()


@router.post("/{profile_id}/submit")
async def submit_session(
    body: SubmitRequest,
    session: UploadSessionManager = Depends(_get_session),
    identity: Identity = Depends(_get_identity),
) -> dict[str, object]:
    """Submit the session for a quality check."""
    try:
        await session.submit(
            client_id=body.client_id,
            vehicle_id=body.vehicle_id,
            task_id=body.task_id,
            fox_id=body.fox_id,
            identity=identity,
        )
    except SubmissionInProgressError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc
    return session.snapshot()


@router.get("/{profile_id}/result")
async def get_result(
    session: UploadSessionManager = Depends(_get_session),
) -> dict[str, object]:
    """Return the result panel state."""
    view = session.reconciler.view
    return {
        "state": session.reconciler.state.value,
        "submit_enabled": session.reconciler.submit_enabled,
        "result": asdict(view) if view is not None else None,
    }
