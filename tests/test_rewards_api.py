import uuid
from datetime import timedelta

from rewards_service.models.redemption import Redemption
from rewards_service.utils.time_utils import utcnow

from conftest import ADMIN, USER_A, USER_B


def _create_payload(**kwargs):
    payload = {
        "name": "Course discount",
        "description": "20% off any course",
        "points_cost": 100,
        "category": "discount",
    }
    payload.update(kwargs)
    return payload


# ------------------------------------------------------------
# auth
# ------------------------------------------------------------
def test_missing_user_context_is_401(client, make_reward):
    reward = make_reward()

    res = client.post(f"/rewards/redeem/{reward.id}")

    assert res.status_code == 401
    assert res.json()["detail"] == "Unauthorized: No user context provided"


def test_admin_routes_reject_regular_users(client):
    assert client.get("/rewards/admin/all", headers=USER_A).status_code == 403
    assert client.post("/rewards", json=_create_payload(), headers=USER_A).status_code == 403
    assert client.get("/rewards/verify/ABC", headers=USER_A).status_code == 403
    assert client.patch(f"/rewards/mark-used/{uuid.uuid4()}", headers=USER_A).status_code == 403


def test_unknown_role_has_no_capabilities(client):
    res = client.get("/rewards/history", headers={"X-User-Id": "x", "X-User-Role": "guest"})

    assert res.status_code == 403


# ------------------------------------------------------------
# catalog
# ------------------------------------------------------------
def test_create_reward_defaults(client):
    res = client.post("/rewards", json=_create_payload(), headers=ADMIN)

    assert res.status_code == 201
    body = res.json()
    assert body["quantity"] == -1
    assert body["is_active"] is True
    assert body["availability"] == "available"
    assert body["created_by"] == "admin-1"
    assert body["valid_from"] is not None
    assert body["valid_until"] is None


def test_create_reward_validation_is_400(client):
    assert client.post("/rewards", json=_create_payload(points_cost=0), headers=ADMIN).status_code == 400
    assert client.post("/rewards", json=_create_payload(quantity=-2), headers=ADMIN).status_code == 400
    assert client.post("/rewards", json=_create_payload(category="cash"), headers=ADMIN).status_code == 400
    assert client.post("/rewards", json={"name": "x"}, headers=ADMIN).status_code == 400

    bad_window = _create_payload(
        valid_from="2026-05-01T00:00:00Z",
        valid_until="2026-04-01T00:00:00Z",
    )
    assert client.post("/rewards", json=bad_window, headers=ADMIN).status_code == 400


def test_duplicate_reward_name_is_409(client):
    assert client.post("/rewards", json=_create_payload(), headers=ADMIN).status_code == 201

    res = client.post("/rewards", json=_create_payload(), headers=ADMIN)

    assert res.status_code == 409
    assert res.json()["detail"] == "Reward name already exists"


def test_update_reward_partial(client, make_reward):
    reward = make_reward(points_cost=50, quantity=5)

    res = client.patch(f"/rewards/{reward.id}", json={"quantity": 0, "code": "PARTNER-10"}, headers=ADMIN)

    assert res.status_code == 200
    body = res.json()
    assert body["quantity"] == 0
    assert body["code"] == "PARTNER-10"
    assert body["points_cost"] == 50
    assert body["availability"] == "out_of_stock"


def test_update_reward_rejects_inverted_window_and_nulls(client, make_reward):
    now = utcnow()
    reward = make_reward(valid_from=now - timedelta(days=1))

    inverted = {"valid_until": (now - timedelta(days=2)).isoformat()}
    assert client.patch(f"/rewards/{reward.id}", json=inverted, headers=ADMIN).status_code == 400
    assert client.patch(f"/rewards/{reward.id}", json={"name": None}, headers=ADMIN).status_code == 400


def test_update_unknown_reward_is_404(client):
    res = client.patch(f"/rewards/{uuid.uuid4()}", json={"quantity": 1}, headers=ADMIN)

    assert res.status_code == 404
    assert res.json()["detail"] == "Reward not found"


def test_available_lists_only_redeemable_sorted_by_cost(client, make_reward):
    now = utcnow()
    cheap = make_reward(name="Sticker", points_cost=10, category="merchandise")
    pricey = make_reward(name="Certificate", points_cost=500, category="certificate", quantity=3)
    make_reward(name="Hidden", is_active=False)
    make_reward(name="Gone", quantity=0)
    make_reward(name="Old", valid_until=now - timedelta(days=1))
    soon = make_reward(name="Soon", valid_from=now + timedelta(days=2))

    res = client.get("/rewards/available")
    assert res.status_code == 200
    assert [r["id"] for r in res.json()] == [str(cheap.id), str(pricey.id)]

    res = client.get("/rewards/available", params={"category": "certificate"})
    assert [r["id"] for r in res.json()] == [str(pricey.id)]

    res = client.get("/rewards/available", params={"status": "scheduled"})
    assert [r["id"] for r in res.json()] == [str(soon.id)]

    assert client.get("/rewards/available", params={"status": "inactive"}).status_code == 400


def test_admin_all_filters(client, make_reward):
    make_reward(name="On")
    off = make_reward(name="Off", is_active=False)
    empty = make_reward(name="Empty", quantity=0)

    res = client.get("/rewards/admin/all", headers=ADMIN)
    assert res.status_code == 200
    assert len(res.json()) == 3

    res = client.get("/rewards/admin/all", params={"isActive": "false"}, headers=ADMIN)
    assert [r["id"] for r in res.json()] == [str(off.id)]

    res = client.get("/rewards/admin/all", params={"status": "out_of_stock"}, headers=ADMIN)
    assert [r["id"] for r in res.json()] == [str(empty.id)]


# ------------------------------------------------------------
# redemption lifecycle
# ------------------------------------------------------------
def test_redeem_returns_code_and_new_balance(client, make_reward, fund):
    reward = make_reward(points_cost=100, quantity=1)
    fund("user-a", 150)

    res = client.post(f"/rewards/redeem/{reward.id}", headers=USER_A)

    assert res.status_code == 200
    body = res.json()
    assert body["points_spent"] == 100
    assert body["points_balance"] == 50
    assert body["redemption_code"]
    assert body["expires_at"]
    assert body["reward"]["quantity"] == 0


def test_second_user_loses_the_last_unit(client, make_reward, fund):
    reward = make_reward(points_cost=100, quantity=1)
    fund("user-a", 150)
    fund("user-b", 150)

    assert client.post(f"/rewards/redeem/{reward.id}", headers=USER_A).status_code == 200

    res = client.post(f"/rewards/redeem/{reward.id}", headers=USER_B)
    assert res.status_code == 409
    assert res.json()["detail"] == "reward unavailable"

    wallet = client.get("/wallet", headers=USER_B).json()
    assert wallet["points_balance"] == 150


def test_redeem_without_enough_points(client, make_reward, fund):
    reward = make_reward(points_cost=100)
    fund("user-a", 20)

    res = client.post(f"/rewards/redeem/{reward.id}", headers=USER_A)

    assert res.status_code == 409
    assert res.json()["detail"] == "insufficient balance"


def test_redeem_unknown_or_malformed_reward(client):
    assert client.post(f"/rewards/redeem/{uuid.uuid4()}", headers=USER_A).status_code == 404
    assert client.post("/rewards/redeem/not-a-uuid", headers=USER_A).status_code == 400


def test_history_shows_only_own_redemptions(client, make_reward, fund):
    reward = make_reward(points_cost=10)
    fund("user-a", 100)
    fund("user-b", 100)

    client.post(f"/rewards/redeem/{reward.id}", headers=USER_A)
    client.post(f"/rewards/redeem/{reward.id}", headers=USER_A)
    client.post(f"/rewards/redeem/{reward.id}", headers=USER_B)

    res = client.get("/rewards/history", headers=USER_A)

    assert res.status_code == 200
    items = res.json()
    assert len(items) == 2
    assert all(r["user_id"] == "user-a" for r in items)
    assert all(r["status"] == "active" for r in items)
    assert items[0]["reward"]["id"] == str(reward.id)
    assert items[0]["redeemed_at"] >= items[1]["redeemed_at"]


def test_verify_then_mark_used(client, make_reward, fund):
    reward = make_reward(points_cost=10)
    fund("user-a", 10)
    issued = client.post(f"/rewards/redeem/{reward.id}", headers=USER_A).json()

    res = client.get(f"/rewards/verify/{issued['redemption_code']}", headers=ADMIN)
    assert res.status_code == 200
    assert res.json()["status"] == "active"
    assert res.json()["is_used"] is False

    res = client.patch(f"/rewards/mark-used/{issued['redemption_id']}", headers=ADMIN)
    assert res.status_code == 200
    assert res.json()["status"] == "used"
    assert res.json()["used_by"] == "admin-1"

    res = client.patch(f"/rewards/mark-used/{issued['redemption_id']}", headers=ADMIN)
    assert res.status_code == 409
    assert res.json()["detail"] == "already used"

    res = client.get(f"/rewards/verify/{issued['redemption_code']}", headers=ADMIN)
    assert res.json()["status"] == "used"


def test_verify_reports_expired_code(client, db, make_reward):
    reward = make_reward(points_cost=10)
    now = utcnow()
    db.add(
        Redemption(
            user_id="user-a",
            reward_id=reward.id,
            points_spent=10,
            redemption_code="DEADBEEF-0001",
            redeemed_at=now - timedelta(days=8),
            expires_at=now - timedelta(days=1),
        )
    )
    db.commit()

    res = client.get("/rewards/verify/DEADBEEF-0001", headers=ADMIN)

    assert res.status_code == 200
    assert res.json()["status"] == "expired"
    assert res.json()["is_used"] is False


def test_verify_unknown_code_is_404(client):
    res = client.get("/rewards/verify/NOPE-0000", headers=ADMIN)

    assert res.status_code == 404
    assert res.json()["detail"] == "Redemption not found"


def test_root(client):
    assert client.get("/").json() == {"message": "Rewards Service is running"}


def test_verify_reports_the_status_computed_at_lookup(client, make_reward, fund, monkeypatch):
    from rewards_service.services import redemption_service

    reward = make_reward(points_cost=10, validity_days=7)
    fund("user-a", 10)
    issued = client.post(f"/rewards/redeem/{reward.id}", headers=USER_A).json()

    lookup = redemption_service.verify_redemption
    later = utcnow() + timedelta(days=8)
    monkeypatch.setattr(
        redemption_service,
        "verify_redemption",
        lambda db, code: lookup(db, code, now=later),
    )

    res = client.get(f"/rewards/verify/{issued['redemption_code']}", headers=ADMIN)

    assert res.status_code == 200
    assert res.json()["status"] == "expired"
    assert res.json()["is_used"] is False
