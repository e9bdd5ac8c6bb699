# =============================================================================
# Score Routes
# =============================================================================
#
#   GET    /api/scores?concertId=...  - Scores of a concert with comment history
#   GET    /api/scores?id=...         - One score
#   POST   /api/scores                - Create (admin)
#   PUT    /api/scores                - Merge-patch, `scoreId` in body; a non-blank
#                                       `comment` is appended to the history (admin)
#   DELETE /api/scores?id=...         - Remove with its comments (admin)
#
# =============================================================================

from fastapi import APIRouter, Depends, Query

from orchlink.api.deps import get_service, require_param
from orchlink.api.errors import BoundaryRoute
from orchlink.auth.context import AuthContext, get_auth_context
from orchlink.core.models import ScoreCreate, ScoreUpdate
from orchlink.services.orchestra import OrchestraService

router = APIRouter(prefix="/api/scores", tags=["scores"], route_class=BoundaryRoute)


@router.get("")
async def get_scores(
    concert_id: str | None = Query(default=None, alias="concertId"),
    score_id: str | None = Query(default=None, alias="id"),
    service: OrchestraService = Depends(get_service),
):
    if score_id and score_id.strip():
        score = await service.get_score(score_id.strip())
        return {"success": True, "data": score.to_api()}

    scores = await service.list_scores(require_param(concert_id, "concertId"))
    return {"success": True, "data": [s.to_api() for s in scores]}


@router.post("")
async def create_score(
    data: ScoreCreate,
    ctx: AuthContext = Depends(get_auth_context),
    service: OrchestraService = Depends(get_service),
):
    score = await service.create_score(data, actor=ctx.subject_id)
    return {"success": True, "message": "Score created", "data": score.to_api()}


@router.put("")
async def update_score(
    data: ScoreUpdate,
    ctx: AuthContext = Depends(get_auth_context),
    service: OrchestraService = Depends(get_service),
):
    score = await service.update_score(data, actor=ctx.subject_id)
    return {"success": True, "message": "Score updated", "data": score.to_api()}


@router.delete("")
async def delete_score(
    score_id: str | None = Query(default=None, alias="id"),
    ctx: AuthContext = Depends(get_auth_context),
    service: OrchestraService = Depends(get_service),
):
    await service.delete_score(require_param(score_id, "id"), actor=ctx.subject_id)
    return {"success": True, "message": "Score deleted"}
