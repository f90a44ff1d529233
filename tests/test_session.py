"""
Tests for the session state.
"""

import pytest

from core.session import SessionState
from errors import PermissionDeniedError


def test_starts_anonymous(session):
    assert session.token is None
    assert session.user is None
    assert not session.is_logged_in
    assert not session.is_admin
    assert session.account_id is None


def test_login_admin(session, admin_user):
    session.login("tok", admin_user)
    assert session.is_logged_in
    assert session.is_admin
    assert session.account_id == 7


def test_login_regular_user(session, regular_user):
    session.login("tok", regular_user)
    assert session.is_logged_in
    assert not session.is_admin


def test_logout_clears_both(session, admin_user):
    session.login("tok", admin_user)
    session.logout()
    assert session.token is None and session.user is None
    assert not session.is_admin


def test_logout_is_idempotent(session):
    listener_calls = []
    session.subscribe(listener_calls.append)
    session.logout()
    session.logout()
    assert listener_calls == []
    assert not session.is_logged_in


def test_listeners_see_each_transition(session, admin_user):
    seen = []
    session.subscribe(lambda s: seen.append(s.is_admin))
    session.login("tok", admin_user)
    session.invalidate()
    assert seen == [True, False]


class TestRequireAdmin:
    def test_anonymous(self, session):
        with pytest.raises(PermissionDeniedError, match="Login required"):
            session.require_admin()

    def test_non_admin(self, session, regular_user):
        session.login("tok", regular_user)
        with pytest.raises(PermissionDeniedError, match="permission"):
            session.require_admin()

    def test_admin(self, session, admin_user):
        session.login("tok", admin_user)
        session.require_admin()


def test_independent_instances(admin_user):
    first, second = SessionState(), SessionState()
    first.login("tok", admin_user)
    assert not second.is_logged_in
