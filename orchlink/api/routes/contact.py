# =============================================================================
# Contact Routes
# =============================================================================
#
#   GET /api/contact  - Current contact details
#   PUT /api/contact  - Merge-patch; the first write creates the record (admin)
#
# =============================================================================

from fastapi import APIRouter, Depends

from orchlink.api.deps import get_service
from orchlink.api.errors import BoundaryRoute
from orchlink.auth.context import AuthContext, get_auth_context
from orchlink.core.models import ContactInfoUpdate
from orchlink.services.orchestra import OrchestraService

router = APIRouter(prefix="/api/contact", tags=["contact"], route_class=BoundaryRoute)


@router.get("")
async def get_contact_info(service: OrchestraService = Depends(get_service)):
    contact = await service.get_contact_info()
    return {"success": True, "data": contact.to_api()}


@router.put("")
async def update_contact_info(
    data: ContactInfoUpdate,
    ctx: AuthContext = Depends(get_auth_context),
    service: OrchestraService = Depends(get_service),
):
    contact = await service.update_contact_info(data, actor=ctx.subject_id)
    return {"success": True, "message": "Contact info updated", "data": contact.to_api()}
