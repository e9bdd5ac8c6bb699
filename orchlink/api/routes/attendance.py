# =============================================================================
# Attendance Form Routes
# =============================================================================
#
#   GET    /api/attendance?concertId=...  - Forms of a concert, newest first
#   GET    /api/attendance?id=...         - One form
#   POST   /api/attendance                - Create (admin)
#   PUT    /api/attendance                - Merge-patch, `attendanceFormId` in body (admin)
#   DELETE /api/attendance?id=...         - Remove (admin)
#
# =============================================================================

from fastapi import APIRouter, Depends, Query

from orchlink.api.deps import get_service, require_param
from orchlink.api.errors import BoundaryRoute
from orchlink.auth.context import AuthContext, get_auth_context
from orchlink.core.models import AttendanceFormCreate, AttendanceFormUpdate
from orchlink.services.orchestra import OrchestraService

router = APIRouter(prefix="/api/attendance", tags=["attendance"], route_class=BoundaryRoute)


@router.get("")
async def get_attendance_forms(
    concert_id: str | None = Query(default=None, alias="concertId"),
    form_id: str | None = Query(default=None, alias="id"),
    service: OrchestraService = Depends(get_service),
):
    if form_id and form_id.strip():
        form = await service.get_attendance_form(form_id.strip())
        return {"success": True, "data": form.to_api()}

    forms = await service.list_attendance_forms(require_param(concert_id, "concertId"))
    return {"success": True, "data": [f.to_api() for f in forms]}


@router.post("")
async def create_attendance_form(
    data: AttendanceFormCreate,
    ctx: AuthContext = Depends(get_auth_context),
    service: OrchestraService = Depends(get_service),
):
    form = await service.create_attendance_form(data, actor=ctx.subject_id)
    return {"success": True, "message": "Attendance form created", "data": form.to_api()}


@router.put("")
async def update_attendance_form(
    data: AttendanceFormUpdate,
    ctx: AuthContext = Depends(get_auth_context),
    service: OrchestraService = Depends(get_service),
):
    form = await service.update_attendance_form(data, actor=ctx.subject_id)
    return {"success": True, "message": "Attendance form updated", "data": form.to_api()}


@router.delete("")
async def delete_attendance_form(
    form_id: str | None = Query(default=None, alias="id"),
    ctx: AuthContext = Depends(get_auth_context),
    service: OrchestraService = Depends(get_service),
):
    await service.delete_attendance_form(require_param(form_id, "id"), actor=ctx.subject_id)
    return {"success": True, "message": "Attendance form deleted"}
