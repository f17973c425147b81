from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rewards_service.config import settings
from rewards_service.db import get_db
from rewards_service.deps.context import Capability, RequestContext, requires
from rewards_service.schemas.redemption import (
    RedemptionDetailOut,
    RedemptionIssuedOut,
    RedemptionOut,
    RedemptionStatus,
)
from rewards_service.schemas.reward import (
    RewardAvailability,
    RewardCategory,
    RewardCreate,
    RewardOut,
    RewardUpdate,
)
from rewards_service.services import redemption_service, reward_service
from rewards_service.services.wallet_service import get_points_balance


router = APIRouter(prefix="/rewards", tags=["rewards"])


@router.get("/available", response_model=list[RewardOut])
def list_available_rewards(
    category: RewardCategory | None = None,
    status: RewardAvailability = RewardAvailability.AVAILABLE,
    db: Session = Depends(get_db),
):
    return reward_service.list_available_rewards(
        db,
        category=(category.value if category else None),
        status=status,
    )


@router.get("/admin/all", response_model=list[RewardOut])
def list_all_rewards(
    category: RewardCategory | None = None,
    isActive: bool | None = None,
    status: RewardAvailability | None = None,
    ctx: RequestContext = Depends(requires(Capability.ADMIN_REWARDS)),
    db: Session = Depends(get_db),
):
    return reward_service.list_all_rewards(
        db,
        category=(category.value if category else None),
        is_active=isActive,
        status=status,
    )


@router.post("", response_model=RewardOut, status_code=201)
def create_reward(
    payload: RewardCreate,
    ctx: RequestContext = Depends(requires(Capability.ADMIN_REWARDS)),
    db: Session = Depends(get_db),
):
    reward = reward_service.create_reward(db, payload, created_by=ctx.user_id)
    db.commit()
    db.refresh(reward)
    return reward


@router.post("/redeem/{reward_id}", response_model=RedemptionIssuedOut)
def redeem_reward(
    reward_id: UUID,
    ctx: RequestContext = Depends(requires(Capability.REDEEM_REWARDS)),
    db: Session = Depends(get_db),
):
    redemption = redemption_service.issue_redemption(db, ctx.user_id, reward_id)
    db.commit()
    db.refresh(redemption)

    return RedemptionIssuedOut(
        redemption_id=redemption.id,
        redemption_code=redemption.redemption_code,
        expires_at=redemption.expires_at,
        points_spent=redemption.points_spent,
        points_balance=get_points_balance(db, ctx.user_id),
        reward=RewardOut.model_validate(redemption.reward),
    )


@router.get("/history", response_model=list[RedemptionOut])
def redemption_history(
    limit: int = 100,
    offset: int = 0,
    ctx: RequestContext = Depends(requires(Capability.VIEW_HISTORY)),
    db: Session = Depends(get_db),
):
    limit = max(1, min(limit, settings.HISTORY_MAX_LIMIT))
    offset = max(0, offset)

    return redemption_service.list_user_redemptions(db, ctx.user_id, limit=limit, offset=offset)


@router.get("/verify/{code}", response_model=RedemptionDetailOut)
def verify_redemption_code(
    code: str,
    ctx: RequestContext = Depends(requires(Capability.ADMIN_REWARDS)),
    db: Session = Depends(get_db),
):
    redemption, status = redemption_service.verify_redemption(db, code)
    return RedemptionDetailOut.model_validate(redemption).model_copy(update={"status": RedemptionStatus(status)})


@router.patch("/mark-used/{redemption_id}", response_model=RedemptionDetailOut)
def mark_redemption_used(
    redemption_id: UUID,
    ctx: RequestContext = Depends(requires(Capability.ADMIN_REWARDS)),
    db: Session = Depends(get_db),
):
    redemption = redemption_service.mark_redemption_used(db, redemption_id, admin_id=ctx.user_id)
    db.commit()
    db.refresh(redemption)
    return redemption


@router.patch("/{reward_id}", response_model=RewardOut)
def update_reward(
    reward_id: UUID,
    payload: RewardUpdate,
    ctx: RequestContext = Depends(requires(Capability.ADMIN_REWARDS)),
    db: Session = Depends(get_db),
):
    reward = reward_service.update_reward(db, reward_id, payload)
    db.commit()
    db.refresh(reward)
    return reward
