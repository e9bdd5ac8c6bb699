# =============================================================================
# Concert Routes
# =============================================================================
#
#   GET    /api/concerts?active=true   - List concerts (optionally active only)
#   GET    /api/concerts?id=...        - One concert with forms, scores, practices
#   POST   /api/concerts               - Create (admin)
#   PUT    /api/concerts               - Merge-patch, `concertId` in body (admin)
#   DELETE /api/concerts?id=...        - Deactivate (admin); children are kept
#
# =============================================================================

from fastapi import APIRouter, Depends, Query

from orchlink.api.deps import get_service, require_param
from orchlink.api.errors import BoundaryRoute
from orchlink.auth.context import AuthContext, get_auth_context
from orchlink.core.models import ConcertCreate, ConcertUpdate
from orchlink.services.orchestra import OrchestraService

router = APIRouter(prefix="/api/concerts", tags=["concerts"], route_class=BoundaryRoute)


@router.get("")
async def get_concerts(
    active: str | None = None,
    concert_id: str | None = Query(default=None, alias="id"),
    service: OrchestraService = Depends(get_service),
):
    """
    List concerts, or fetch one concert's detail when `id` is given.

    Only `active=true` filters; any other value (or none) lists everything.
    An empty `id` falls back to the list.
    """
    if concert_id and concert_id.strip():
        detail = await service.get_concert_detail(concert_id.strip())
        return {"success": True, "data": detail.to_api()}

    concerts = await service.list_concerts(active_only=active == "true")
    return {"success": True, "data": [c.to_api() for c in concerts]}


@router.post("")
async def create_concert(
    data: ConcertCreate,
    ctx: AuthContext = Depends(get_auth_context),
    service: OrchestraService = Depends(get_service),
):
    concert = await service.create_concert(data, actor=ctx.subject_id)
    return {"success": True, "message": "Concert created", "data": concert.to_api()}


@router.put("")
async def update_concert(
    data: ConcertUpdate,
    ctx: AuthContext = Depends(get_auth_context),
    service: OrchestraService = Depends(get_service),
):
    concert = await service.update_concert(data, actor=ctx.subject_id)
    return {"success": True, "message": "Concert updated", "data": concert.to_api()}


@router.delete("")
async def delete_concert(
    concert_id: str | None = Query(default=None, alias="id"),
    ctx: AuthContext = Depends(get_auth_context),
    service: OrchestraService = Depends(get_service),
):
    """Soft delete. Attendance forms, scores and practices stay in place."""
    concert = await service.delete_concert(require_param(concert_id, "id"), actor=ctx.subject_id)
    return {"success": True, "message": "Concert deactivated", "data": concert.to_api()}
