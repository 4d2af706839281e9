from datetime import date

import pytest

from config import TestConfig
from pardna import create_app
from pardna.extensions import db
from pardna.models import User
from pardna.services.plan_service import PlanService
from pardna.services.requests import CreatePlanRequest, ParticipantInput


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def session(app):
    return db.session


@pytest.fixture
def banker(session):
    user = User(name='Miss Ivy', email='ivy@example.com')
    session.add(user)
    session.commit()
    return user


@pytest.fixture
def other_user(session):
    user = User(name='Mr Desmond', email='desmond@example.com')
    session.add(user)
    session.commit()
    return user


@pytest.fixture
def client(app, banker):
    client = app.test_client()
    with client.session_transaction() as sess:
        sess['_user_id'] = str(banker.id)
        sess['_fresh'] = True
    return client


@pytest.fixture
def participants():
    return [
        ParticipantInput(name='Ann', email='ann@example.com'),
        ParticipantInput(name='Bob', email='bob@example.com'),
    ]


@pytest.fixture
def make_plan(session, banker, participants):
    """Create a plan through PlanService with sensible defaults."""
    def _make_plan(**overrides):
        fields = dict(
            name='Sunday Pardna',
            start_date=date(2024, 1, 1),
            participants=list(participants),
            duration=3,
            contribution_amount=100.0,
        )
        fields.update(overrides)
        return PlanService(session).create_plan(banker.id, CreatePlanRequest(**fields))

    return _make_plan
