import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rewards_service.db import Base, get_db
from rewards_service.main import app
from rewards_service.models.reward import Reward
from rewards_service.models.user_points import UserPoints


USER_A = {"X-User-Id": "user-a"}
USER_B = {"X-User-Id": "user-b"}
ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def make_reward(db):
    counter = {"n": 0}

    def _make(**kwargs):
        counter["n"] += 1
        data = {
            "name": f"Reward {counter['n']}",
            "description": "A reward",
            "category": "other",
            "points_cost": 100,
            "quantity": -1,
            "is_active": True,
        }
        data.update(kwargs)
        reward = Reward(**data)
        db.add(reward)
        db.commit()
        db.refresh(reward)
        return reward

    return _make


@pytest.fixture
def fund(db):
    def _fund(user_id: str, points: int):
        row = db.query(UserPoints).filter(UserPoints.user_id == user_id).first()
        if row is None:
            row = UserPoints(user_id=user_id, total_points=points)
            db.add(row)
        else:
            row.total_points = points
        db.commit()
        return row

    return _fund
