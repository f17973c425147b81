from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rewards_service.config import settings
from rewards_service.db import get_db
from rewards_service.deps.context import Capability, RequestContext, requires
from rewards_service.schemas.wallet import PointMovementOut, WalletOut
from rewards_service.services.wallet_service import get_points_balance, list_point_movements

router = APIRouter(prefix="/wallet", tags=["wallet"])


@router.get("", response_model=WalletOut)
def read_wallet(
    ctx: RequestContext = Depends(requires(Capability.VIEW_WALLET)),
    db: Session = Depends(get_db),
):
    return WalletOut(user_id=ctx.user_id, points_balance=get_points_balance(db, ctx.user_id))


@router.get("/movements", response_model=list[PointMovementOut])
def read_wallet_movements(
    limit: int = 100,
    offset: int = 0,
    ctx: RequestContext = Depends(requires(Capability.VIEW_WALLET)),
    db: Session = Depends(get_db),
):
    limit = max(1, min(limit, settings.HISTORY_MAX_LIMIT))
    offset = max(0, offset)

    return list_point_movements(db, ctx.user_id, limit=limit, offset=offset)
