import logging
import secrets
import time
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rewards_service.config import settings
from rewards_service.errors import (
    Conflict,
    NotFound,
    ALREADY_USED,
    INSUFFICIENT_BALANCE,
    REDEMPTION_CODE_COLLISION,
    REDEMPTION_EXPIRED,
    REDEMPTION_NOT_FOUND,
    REWARD_NOT_FOUND,
    REWARD_UNAVAILABLE,
)
from rewards_service.models.redemption import Redemption
from rewards_service.models.reward import Reward
from rewards_service.services.wallet_service import debit_points, record_movement
from rewards_service.utils.time_utils import utcnow


logger = logging.getLogger(__name__)

CODE_ATTEMPTS = 5


def generate_redemption_code() -> str:
    # 8 hex chars of randomness + the tail of the millisecond clock
    random_part = secrets.token_hex(4).upper()
    clock_part = str(int(time.time() * 1000))[-4:]
    return f"{random_part}-{clock_part}"


def _unique_code(db: Session) -> str | None:
    for _ in range(CODE_ATTEMPTS):
        code = generate_redemption_code()
        taken = db.query(Redemption.id).filter(Redemption.redemption_code == code).first()
        if not taken:
            return code
    return None


def compute_expires_at(reward: Reward, now: datetime, default_days: int | None = None) -> datetime:
    days = reward.validity_days or default_days or settings.REDEMPTION_VALIDITY_DAYS
    expires_at = now + timedelta(days=days)
    if reward.valid_until is not None and reward.valid_until < expires_at:
        expires_at = reward.valid_until
    return expires_at


def _reject(db: Session, detail: str, **context):
    db.rollback()
    logger.info("redemption rejected", extra={"reason": detail, **context})
    raise Conflict(detail)


# ============================================================
# ISSUE
# ============================================================
def issue_redemption(db: Session, user_id: str, reward_id, now: datetime | None = None) -> Redemption:
    """Spend `user_id`'s points on one unit of a reward.

    Stock and balance are each taken with a single conditional UPDATE, so
    two requests racing for the last unit cannot both pass the check. A
    failure after the stock decrement rolls the whole session back.
    """
    now = now or utcnow()

    reward = db.query(Reward).filter(Reward.id == reward_id).first()
    if not reward:
        raise NotFound(REWARD_NOT_FOUND)

    ctx = {"user_id": user_id, "reward_id": str(reward.id)}

    availability = reward.availability_at(now)
    if availability != "available":
        _reject(db, REWARD_UNAVAILABLE, availability=availability, **ctx)

    cost = int(reward.points_cost)
    reward_name = reward.name

    # 1️⃣ stock: compare-and-decrement, unlimited rewards are never touched
    if not reward.is_unlimited:
        taken = (
            db.query(Reward)
            .filter(
                Reward.id == reward.id,
                Reward.is_active.is_(True),
                Reward.quantity > 0,
            )
            .update({Reward.quantity: Reward.quantity - 1}, synchronize_session=False)
        )
        if taken != 1:
            _reject(db, REWARD_UNAVAILABLE, availability="out_of_stock", **ctx)

    # 2️⃣ balance: compare-and-decrement
    if not debit_points(db, user_id, cost):
        _reject(db, INSUFFICIENT_BALANCE, points_cost=cost, **ctx)

    # 3️⃣ the redemption itself
    code = _unique_code(db)
    if code is None:
        _reject(db, REDEMPTION_CODE_COLLISION, **ctx)

    redemption = Redemption(
        user_id=user_id,
        reward_id=reward.id,
        points_spent=cost,
        redemption_code=code,
        redeemed_at=now,
        expires_at=compute_expires_at(reward, now),
        is_used=False,
    )
    db.add(redemption)
    try:
        db.flush()
    except IntegrityError:
        # uq_redemptions_redemption_code: taken between the check and the insert
        _reject(db, REDEMPTION_CODE_COLLISION, **ctx)

    record_movement(
        db,
        user_id=user_id,
        points=-cost,
        type="SPEND",
        description=f"Redeemed reward: {reward_name}",
        source_redemption_id=redemption.id,
    )

    db.refresh(reward)

    logger.info(
        "redemption issued",
        extra={
            "redemption_id": str(redemption.id),
            "points_spent": cost,
            "expires_at": redemption.expires_at.isoformat(),
            **ctx,
        },
    )
    return redemption


# ============================================================
# VERIFY (read only)
# ============================================================
def get_redemption_by_code(db: Session, code: str) -> Redemption:
    normalized = (code or "").strip().upper()
    redemption = (
        db.query(Redemption)
        .filter(Redemption.redemption_code == normalized)
        .first()
    )
    if not redemption:
        raise NotFound(REDEMPTION_NOT_FOUND)
    return redemption


def verify_redemption(db: Session, code: str, now: datetime | None = None):
    now = now or utcnow()
    redemption = get_redemption_by_code(db, code)
    return redemption, redemption.status_at(now)


# ============================================================
# MARK USED
# ============================================================
def mark_redemption_used(
    db: Session,
    redemption_id,
    admin_id: str | None = None,
    now: datetime | None = None,
    allow_expired: bool | None = None,
) -> Redemption:
    now = now or utcnow()
    if allow_expired is None:
        allow_expired = settings.ALLOW_EXPIRED_MARK_USED

    redemption = db.query(Redemption).filter(Redemption.id == redemption_id).first()
    if not redemption:
        raise NotFound(REDEMPTION_NOT_FOUND)

    if redemption.is_used:
        raise Conflict(ALREADY_USED)

    if not allow_expired and redemption.status_at(now) == "expired":
        raise Conflict(REDEMPTION_EXPIRED)

    # one-way flip; a concurrent call that already flipped it matches 0 rows
    flipped = (
        db.query(Redemption)
        .filter(Redemption.id == redemption.id, Redemption.is_used.is_(False))
        .update(
            {
                Redemption.is_used: True,
                Redemption.used_at: now,
                Redemption.used_by: admin_id,
            },
            synchronize_session=False,
        )
    )
    if flipped != 1:
        db.rollback()
        raise Conflict(ALREADY_USED)

    db.flush()
    db.refresh(redemption)

    logger.info(
        "redemption marked used",
        extra={
            "redemption_id": str(redemption.id),
            "user_id": redemption.user_id,
            "used_by": admin_id,
        },
    )
    return redemption


# ============================================================
# HISTORY
# ============================================================
def list_user_redemptions(db: Session, user_id: str, limit: int = 100, offset: int = 0):
    return (
        db.query(Redemption)
        .filter(Redemption.user_id == user_id)
        .order_by(Redemption.redeemed_at.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
