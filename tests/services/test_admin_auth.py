"""Admin Authentication — credential checks against the admin_users table.

Invariants:
    - Correct password → AdminUser without hash material
    - Wrong password or unknown user → None
    - Rate limiting past the retry budget propagates as DataServiceError
    - Seeding reports an existing username as False instead of failing
"""

import pytest

from admin_gateway.core.credentials import hash_cost, verify_password
from admin_gateway.core.errors import DataServiceError, MalformedHashError
from admin_gateway.services.admin_auth import AdminAuthService, seed_admin_user

from tests.services.conftest import ADMIN_PASSWORD


@pytest.fixture
def auth(data_service):
    return AdminAuthService(data_service.client(), policy_cost=4)


async def test_authenticate_success(auth):
    user = await auth.authenticate("admin", ADMIN_PASSWORD)
    assert user is not None
    assert user.id == "admin-1"
    assert user.username == "admin"
    assert user.role == "admin"
    assert not hasattr(user, "password_hash")


async def test_wrong_password_returns_none(auth):
    assert await auth.authenticate("admin", "wrongpassword") is None


async def test_unknown_user_returns_none(auth, data_service):
    assert await auth.authenticate("nobody", ADMIN_PASSWORD) is None
    assert data_service.calls_to("admin_users") == 1


async def test_lookup_filters_by_username(auth, data_service):
    await auth.authenticate("admin", ADMIN_PASSWORD)
    request = data_service.requests[0]
    assert request.url.params["username"] == "eq.admin"
    assert request.url.params["limit"] == "1"


async def test_rate_limit_within_budget_is_transparent(auth, data_service):
    data_service.rate_limit_next(times=2)
    assert await auth.authenticate("admin", ADMIN_PASSWORD) is not None
    assert data_service.calls_to("admin_users") == 3


async def test_rate_limit_exhaustion_propagates(auth, data_service):
    data_service.rate_limit_next(times=3)
    with pytest.raises(DataServiceError) as exc_info:
        await auth.authenticate("admin", ADMIN_PASSWORD)
    assert exc_info.value.rate_limited


async def test_malformed_stored_hash_raises(data_service):
    data_service.tables["admin_users"][0]["password_hash"] = "plaintext"
    auth = AdminAuthService(data_service.client(), policy_cost=4)
    with pytest.raises(MalformedHashError):
        await auth.authenticate("admin", ADMIN_PASSWORD)


async def test_seed_admin_user_stores_hash(data_service):
    client = data_service.client()
    assert await seed_admin_user(client, "editor", "editor@example.com", "s3cret!", cost=4)
    row = data_service.tables["admin_users"][-1]
    assert row["username"] == "editor"
    assert row["password_hash"] != "s3cret!"
    assert hash_cost(row["password_hash"]) == 4
    assert verify_password("s3cret!", row["password_hash"])


async def test_seeded_user_can_authenticate(data_service):
    client = data_service.client()
    await seed_admin_user(client, "editor", None, "s3cret!", cost=4)
    user = await AdminAuthService(client, policy_cost=4).authenticate("editor", "s3cret!")
    assert user is not None
    assert user.username == "editor"


async def test_seed_existing_user_returns_false(data_service):
    data_service.fail_next(409, {"code": "23505", "message": "duplicate key value"})
    client = data_service.client()
    assert await seed_admin_user(client, "admin", None, "whatever", cost=4) is False


async def test_seed_other_failure_propagates(data_service):
    data_service.fail_next(500, {"code": "XX000", "message": "boom"})
    client = data_service.client()
    with pytest.raises(DataServiceError):
        await seed_admin_user(client, "editor", None, "whatever", cost=4)
