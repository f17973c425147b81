from sqlalchemy.orm import Session

from rewards_service.models.point_movement import PointMovement
from rewards_service.models.user_points import UserPoints


def get_points_balance(db: Session, user_id: str) -> int:
    balance = (
        db.query(UserPoints.total_points)
        .filter(UserPoints.user_id == user_id)
        .scalar()
    )

    return int(balance or 0)


# ============================================================
# DEBIT (compare-and-decrement)
# ============================================================
def debit_points(db: Session, user_id: str, points: int) -> bool:
    """Deduct `points` in a single conditional UPDATE.

    Returns False when the user has no balance row or the balance is below
    `points`; nothing is written in that case.
    """
    if points <= 0:
        return True

    updated = (
        db.query(UserPoints)
        .filter(
            UserPoints.user_id == user_id,
            UserPoints.total_points >= points,
        )
        .update(
            {UserPoints.total_points: UserPoints.total_points - points},
            synchronize_session=False,
        )
    )

    return updated == 1


def record_movement(
    db: Session,
    *,
    user_id: str,
    points: int,
    type: str,
    description: str | None = None,
    source_redemption_id=None,
):
    movement = PointMovement(
        user_id=user_id,
        points=points,
        type=type,
        description=description,
        source_redemption_id=source_redemption_id,
    )

    db.add(movement)
    db.flush()

    return movement


def list_point_movements(db: Session, user_id: str, limit: int = 100, offset: int = 0):
    return (
        db.query(PointMovement)
        .filter(PointMovement.user_id == user_id)
        .order_by(PointMovement.created_at.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
