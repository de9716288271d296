"""Admin Session Manager — lifecycle over the SQL session store and a fake cookie jar.

Invariants:
    - validate after create returns the subject id
    - validate after destroy returns None; destroy is idempotent
    - validate after the fixed lifetime returns None without explicit destroy
    - Validation never extends expiry
    - Re-login from the same client revokes the previous session
    - Storage failures surface as SessionStorageError
"""

from datetime import timedelta

import pytest

from admin_gateway.core.domain_types import SessionState
from admin_gateway.core.errors import SessionStorageError
from admin_gateway.core.session_policy import digest_token, generate_token
from admin_gateway.services.admin_session import AdminSessionManager

from tests.services.conftest import BrokenRepository, FakeCookies

LIFETIME = timedelta(hours=24)


@pytest.fixture
def manager(session_repo, clock):
    return AdminSessionManager(session_repo, lifetime=LIFETIME, clock=clock)


async def test_create_then_validate_returns_subject(manager, cookies):
    token = await manager.create_session(cookies, "admin-1")
    assert await manager.validate_session(token) == "admin-1"


async def test_create_sets_cookie_with_lifetime(manager, cookies):
    token = await manager.create_session(cookies, "admin-1")
    assert cookies.jar["admin_session"] == token
    assert cookies.max_ages["admin_session"] == int(LIFETIME.total_seconds())


async def test_only_digest_is_persisted(manager, cookies, session_repo):
    token = await manager.create_session(cookies, "admin-1")
    record = await session_repo.get(digest_token(token))
    assert record is not None
    assert record.token_digest != token
    assert record.expires_at - record.issued_at == LIFETIME


async def test_destroy_then_validate_returns_none(manager, cookies):
    token = await manager.create_session(cookies, "admin-1")
    await manager.destroy_session(cookies)
    assert "admin_session" not in cookies.jar
    assert await manager.validate_session(token) is None


async def test_destroy_is_idempotent(manager, cookies):
    await manager.destroy_session(cookies)
    await manager.destroy_session(cookies)
    assert cookies.deleted == ["admin_session", "admin_session"]


async def test_destroy_with_garbage_cookie_still_clears_it(manager):
    jar = FakeCookies({"admin_session": "not-a-token"})
    await manager.destroy_session(jar)
    assert jar.jar == {}


async def test_session_expires_after_fixed_lifetime(manager, cookies, clock):
    token = await manager.create_session(cookies, "admin-1")
    clock.now += LIFETIME - timedelta(seconds=1)
    assert await manager.validate_session(token) == "admin-1"
    clock.now += timedelta(seconds=1)
    check = await manager.inspect_session(token)
    assert check.state is SessionState.EXPIRED
    assert check.subject_id is None


async def test_expired_record_is_purged_on_validation(manager, cookies, clock, session_repo):
    token = await manager.create_session(cookies, "admin-1")
    clock.now += LIFETIME
    assert await manager.validate_session(token) is None
    assert await session_repo.get(digest_token(token)) is None
    # Purged, so a second look reports absent rather than expired
    assert (await manager.inspect_session(token)).state is SessionState.ABSENT


async def test_validation_does_not_extend_expiry(manager, cookies, clock, session_repo):
    token = await manager.create_session(cookies, "admin-1")
    original = await session_repo.get(digest_token(token))
    for _ in range(3):
        clock.now += timedelta(hours=7)
        assert await manager.validate_session(token) == "admin-1"
    assert (await session_repo.get(digest_token(token))).expires_at == original.expires_at
    clock.now += timedelta(hours=4)
    assert await manager.validate_session(token) is None


@pytest.mark.parametrize("token", [None, "", "garbage", "x" * 43])
async def test_unknown_or_malformed_tokens_are_absent(manager, token):
    check = await manager.inspect_session(token)
    assert check.state is SessionState.ABSENT
    assert await manager.validate_session(token) is None


async def test_relogin_revokes_previous_session(manager, cookies):
    first = await manager.create_session(cookies, "admin-1")
    second = await manager.create_session(cookies, "admin-1")
    assert first != second
    assert cookies.jar["admin_session"] == second
    assert await manager.validate_session(first) is None
    assert await manager.validate_session(second) == "admin-1"


async def test_sessions_from_other_clients_are_independent(manager):
    laptop, phone = FakeCookies(), FakeCookies()
    a = await manager.create_session(laptop, "admin-1")
    b = await manager.create_session(phone, "admin-1")
    await manager.destroy_session(laptop)
    assert await manager.validate_session(a) is None
    assert await manager.validate_session(b) == "admin-1"


async def test_purge_expired_removes_only_expired(manager, clock):
    old = await manager.create_session(FakeCookies(), "admin-1")
    clock.now += timedelta(hours=20)
    fresh = await manager.create_session(FakeCookies(), "admin-2")
    clock.now += timedelta(hours=5)
    assert await manager.purge_expired() == 1
    assert (await manager.inspect_session(old)).state is SessionState.ABSENT
    assert await manager.validate_session(fresh) == "admin-2"


async def test_create_requires_subject(manager, cookies):
    with pytest.raises(ValueError):
        await manager.create_session(cookies, "")


async def test_create_storage_failure_surfaces_and_sets_no_cookie(cookies, clock):
    manager = AdminSessionManager(BrokenRepository(), clock=clock)
    with pytest.raises(SessionStorageError) as exc_info:
        await manager.create_session(cookies, "admin-1")
    assert exc_info.value.operation == "insert"
    assert cookies.jar == {}


async def test_validate_storage_failure_surfaces(clock):
    manager = AdminSessionManager(BrokenRepository(), clock=clock)
    with pytest.raises(SessionStorageError):
        await manager.validate_session(generate_token())


async def test_destroy_storage_failure_surfaces(clock):
    manager = AdminSessionManager(BrokenRepository(), clock=clock)
    jar = FakeCookies({"admin_session": generate_token()})
    with pytest.raises(SessionStorageError):
        await manager.destroy_session(jar)


def test_non_positive_lifetime_rejected(session_repo):
    with pytest.raises(ValueError):
        AdminSessionManager(session_repo, lifetime=timedelta(0))
