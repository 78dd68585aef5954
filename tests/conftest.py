"""
Shared pytest fixtures for the Architectural Showcase Portal test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - user / other_user / admin_user: pre-created accounts
    - auth_headers / other_headers / admin_headers: bearer headers for those accounts
    - manual_timers: deterministic timer factory for autosave tests
"""

import pytest

from showcase import create_app
from showcase.models import db as _db
from showcase.services.jwt_service import generate_access_token
from showcase.services.user_service import register_user


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Accounts ─────────────────────────────────────────────────────────────


def bearer(user):
    return {"Authorization": f"Bearer {generate_access_token(user.id, user.is_admin)}"}


@pytest.fixture()
def user():
    return register_user(
        "architect@example.org", "s3cret-pass",
        firm_name="Stone & Glass Architects", contact_name="Robin Vale",
    )


@pytest.fixture()
def other_user():
    return register_user("other@example.org", "s3cret-pass", firm_name="Other Firm")


@pytest.fixture()
def admin_user():
    return register_user("admin@example.org", "admin-pass-123", is_admin=True)


@pytest.fixture()
def auth_headers(user):
    return bearer(user)


@pytest.fixture()
def admin_headers(admin_user):
    return bearer(admin_user)


@pytest.fixture()
def other_headers(other_user):
    return bearer(other_user)


# ── Deterministic timers ─────────────────────────────────────────────────


class ManualTimer:
    """Stand-in for threading.Timer that only fires when told to."""

    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if self.cancelled or self.fired:
            return
        self.fired = True
        self.function()


class ManualTimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, interval, function):
        timer = ManualTimer(interval, function)
        self.timers.append(timer)
        return timer

    @property
    def live(self):
        return [t for t in self.timers if t.started and not t.cancelled and not t.fired]

    def fire(self):
        """Expire every live timer (normally there is exactly one)."""
        for timer in self.live:
            timer.fire()


@pytest.fixture()
def manual_timers():
    return ManualTimerFactory()
