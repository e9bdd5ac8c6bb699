# =============================================================================
# Practice Routes
# =============================================================================
#
#   GET    /api/practices?concertId=...  - Practices of a concert, earliest first
#   GET    /api/practices?id=...         - One practice
#   POST   /api/practices                - Create (admin)
#   PUT    /api/practices                - Merge-patch, `practiceId` in body (admin)
#   DELETE /api/practices?id=...         - Remove (admin)
#
# =============================================================================

from fastapi import APIRouter, Depends, Query

from orchlink.api.deps import get_service, require_param
from orchlink.api.errors import BoundaryRoute
from orchlink.auth.context import AuthContext, get_auth_context
from orchlink.core.models import PracticeCreate, PracticeUpdate
from orchlink.services.orchestra import OrchestraService

router = APIRouter(prefix="/api/practices", tags=["practices"], route_class=BoundaryRoute)


@router.get("")
async def get_practices(
    concert_id: str | None = Query(default=None, alias="concertId"),
    practice_id: str | None = Query(default=None, alias="id"),
    service: OrchestraService = Depends(get_service),
):
    if practice_id and practice_id.strip():
        practice = await service.get_practice(practice_id.strip())
        return {"success": True, "data": practice.to_api()}

    practices = await service.list_practices(require_param(concert_id, "concertId"))
    return {"success": True, "data": [p.to_api() for p in practices]}


@router.post("")
async def create_practice(
    data: PracticeCreate,
    ctx: AuthContext = Depends(get_auth_context),
    service: OrchestraService = Depends(get_service),
):
    practice = await service.create_practice(data, actor=ctx.subject_id)
    return {"success": True, "message": "Practice created", "data": practice.to_api()}


@router.put("")
async def update_practice(
    data: PracticeUpdate,
    ctx: AuthContext = Depends(get_auth_context),
    service: OrchestraService = Depends(get_service),
):
    practice = await service.update_practice(data, actor=ctx.subject_id)
    return {"success": True, "message": "Practice updated", "data": practice.to_api()}


@router.delete("")
async def delete_practice(
    practice_id: str | None = Query(default=None, alias="id"),
    ctx: AuthContext = Depends(get_auth_context),
    service: OrchestraService = Depends(get_service),
):
    await service.delete_practice(require_param(practice_id, "id"), actor=ctx.subject_id)
    return {"success": True, "message": "Practice deleted"}
