import logging
from datetime import datetime

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from rewards_service.errors import NotFound, ValidationFailed, Conflict, REWARD_NOT_FOUND, REWARD_NAME_TAKEN
from rewards_service.models.reward import Reward, UNLIMITED_QUANTITY
from rewards_service.schemas.reward import RewardAvailability, RewardCreate, RewardUpdate
from rewards_service.utils.time_utils import utcnow


logger = logging.getLogger(__name__)

PUBLIC_LISTING_STATES = {RewardAvailability.AVAILABLE, RewardAvailability.SCHEDULED}


def is_redeemable(reward: Reward, now: datetime) -> bool:
    return reward.availability_at(now) == RewardAvailability.AVAILABLE.value


def _started(now: datetime):
    return or_(Reward.valid_from.is_(None), Reward.valid_from <= now)


def _not_ended(now: datetime):
    return or_(Reward.valid_until.is_(None), Reward.valid_until >= now)


def _in_stock():
    return or_(Reward.quantity == UNLIMITED_QUANTITY, Reward.quantity > 0)


def availability_filter(status: RewardAvailability, now: datetime):
    """SQL counterpart of Reward.availability_at, same precedence."""
    active = Reward.is_active.is_(True)

    if status == RewardAvailability.INACTIVE:
        return Reward.is_active.is_(False)
    if status == RewardAvailability.SCHEDULED:
        return and_(active, Reward.valid_from.isnot(None), Reward.valid_from > now)
    if status == RewardAvailability.EXPIRED:
        return and_(active, _started(now), Reward.valid_until.isnot(None), Reward.valid_until < now)
    if status == RewardAvailability.OUT_OF_STOCK:
        return and_(active, _started(now), _not_ended(now), Reward.quantity == 0)
    return and_(active, _started(now), _not_ended(now), _in_stock())


# ============================================================
# LISTING
# ============================================================
def list_available_rewards(
    db: Session,
    *,
    category: str | None = None,
    status: RewardAvailability = RewardAvailability.AVAILABLE,
    now: datetime | None = None,
):
    now = now or utcnow()
    status = RewardAvailability(status)

    if status not in PUBLIC_LISTING_STATES:
        raise ValidationFailed("status must be one of: available, scheduled")

    q = db.query(Reward).filter(availability_filter(status, now))
    if category:
        q = q.filter(Reward.category == category)

    return q.order_by(Reward.points_cost.asc(), Reward.name.asc()).all()


def list_all_rewards(
    db: Session,
    *,
    category: str | None = None,
    is_active: bool | None = None,
    status: RewardAvailability | None = None,
    now: datetime | None = None,
):
    now = now or utcnow()

    q = db.query(Reward)
    if category:
        q = q.filter(Reward.category == category)
    if is_active is not None:
        q = q.filter(Reward.is_active.is_(is_active))
    if status is not None:
        q = q.filter(availability_filter(RewardAvailability(status), now))

    return q.order_by(Reward.created_at.desc(), Reward.name.asc()).all()


def get_reward(db: Session, reward_id) -> Reward:
    reward = db.query(Reward).filter(Reward.id == reward_id).first()
    if not reward:
        raise NotFound(REWARD_NOT_FOUND)
    return reward


# ============================================================
# ADMIN WRITES
# ============================================================
def _ensure_name_free(db: Session, name: str, exclude_id=None):
    q = db.query(Reward.id).filter(Reward.name == name)
    if exclude_id is not None:
        q = q.filter(Reward.id != exclude_id)
    if q.first():
        raise Conflict(REWARD_NAME_TAKEN)


def create_reward(db: Session, payload: RewardCreate, created_by: str | None = None, now: datetime | None = None):
    now = now or utcnow()

    _ensure_name_free(db, payload.name)

    reward = Reward(
        name=payload.name,
        description=payload.description,
        category=payload.category.value,
        points_cost=payload.points_cost,
        image_url=payload.image_url,
        code=payload.code,
        valid_from=payload.valid_from or now,
        valid_until=payload.valid_until,
        validity_days=payload.validity_days,
        quantity=payload.quantity,
        is_active=payload.is_active,
        created_by=created_by,
    )

    if reward.valid_until is not None and reward.valid_from > reward.valid_until:
        raise ValidationFailed("valid_from must not be after valid_until")

    db.add(reward)
    db.flush()

    logger.info(
        "reward created",
        extra={"reward_id": str(reward.id), "reward_name": reward.name, "created_by": created_by},
    )
    return reward


def update_reward(db: Session, reward_id, payload: RewardUpdate):
    reward = get_reward(db, reward_id)

    data = payload.model_dump(exclude_unset=True)

    # required columns cannot be cleared
    for k in ("name", "description", "points_cost", "category", "quantity", "is_active"):
        if k in data and data[k] is None:
            raise ValidationFailed(f"{k} cannot be null")

    if "name" in data and data["name"] != reward.name:
        _ensure_name_free(db, data["name"], exclude_id=reward.id)

    valid_from = data.get("valid_from", reward.valid_from)
    valid_until = data.get("valid_until", reward.valid_until)
    if valid_from is not None and valid_until is not None and valid_from > valid_until:
        raise ValidationFailed("valid_from must not be after valid_until")

    for k, v in data.items():
        if k == "category":
            v = v.value if hasattr(v, "value") else v
        setattr(reward, k, v)

    db.flush()

    logger.info(
        "reward updated",
        extra={"reward_id": str(reward.id), "fields": sorted(data.keys())},
    )
    return reward
