"""
Tests for permission management
"""

import uuid

import pytest

UPDATE_PERMISSIONS = """
mutation UpdatePermissions($userId: UUID!, $permissions: [Permission!]!) {
    updatePermissions(userId: $userId, permissions: $permissions) {
        id
        permissions
    }
}
"""

USERS = """
query { users { email permissions } }
"""


class TestUpdatePermissions:
    @pytest.mark.asyncio
    async def test_requires_signed_in_caller(self, gql, create_user):
        target_id, _ = await create_user("target@example.com")

        call = await gql(UPDATE_PERMISSIONS, {"userId": str(target_id), "permissions": ["ADMIN"]})

        assert call.error_code == "UNAUTHENTICATED"

    @pytest.mark.asyncio
    async def test_plain_user_is_forbidden(self, gql, create_user):
        _, token = await create_user("plain@example.com", permissions=["USER", "ITEMCREATE"])
        target_id, _ = await create_user("target@example.com")

        call = await gql(
            UPDATE_PERMISSIONS,
            {"userId": str(target_id), "permissions": ["ADMIN"]},
            token=token,
        )

        assert call.error_code == "FORBIDDEN"
        _, admin_token = await create_user("root@example.com", permissions=["ADMIN"])
        users = await gql(USERS, token=admin_token)
        by_email = {u["email"]: u["permissions"] for u in users.data["users"]}
        assert by_email["target@example.com"] == ["USER"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("permission", ["ADMIN", "PERMISSIONUPDATE"])
    async def test_either_permission_may_overwrite(self, gql, create_user, permission):
        _, token = await create_user("boss@example.com", permissions=["USER", permission])
        target_id, _ = await create_user("target@example.com")

        call = await gql(
            UPDATE_PERMISSIONS,
            {"userId": str(target_id), "permissions": ["ITEMCREATE", "ITEMDELETE"]},
            token=token,
        )

        assert call.errors is None, call.errors
        assert call.data["updatePermissions"] == {
            "id": str(target_id),
            "permissions": ["ITEMCREATE", "ITEMDELETE"],
        }

    @pytest.mark.asyncio
    async def test_duplicates_are_collapsed(self, gql, create_user):
        _, token = await create_user("boss@example.com", permissions=["ADMIN"])
        target_id, _ = await create_user("target@example.com")

        call = await gql(
            UPDATE_PERMISSIONS,
            {"userId": str(target_id), "permissions": ["USER", "ADMIN", "USER"]},
            token=token,
        )

        assert call.data["updatePermissions"]["permissions"] == ["USER", "ADMIN"]

    @pytest.mark.asyncio
    async def test_missing_target(self, gql, create_user):
        _, token = await create_user("boss@example.com", permissions=["ADMIN"])

        call = await gql(
            UPDATE_PERMISSIONS,
            {"userId": str(uuid.uuid4()), "permissions": ["USER"]},
            token=token,
        )

        assert call.error_code == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_unknown_permission_is_a_graphql_error(self, gql, create_user):
        _, token = await create_user("boss@example.com", permissions=["ADMIN"])
        target_id, _ = await create_user("target@example.com")

        call = await gql(
            UPDATE_PERMISSIONS,
            {"userId": str(target_id), "permissions": ["SUPERUSER"]},
            token=token,
        )

        assert call.errors
        assert call.data is None


class TestUsersQuery:
    @pytest.mark.asyncio
    async def test_admin_lists_users(self, gql, create_user):
        _, token = await create_user("admin@example.com", permissions=["ADMIN"])
        await create_user("b@example.com")

        call = await gql(USERS, token=token)

        assert call.errors is None
        assert [u["email"] for u in call.data["users"]] == ["admin@example.com", "b@example.com"]

    @pytest.mark.asyncio
    async def test_plain_user_is_forbidden(self, gql, create_user):
        _, token = await create_user("plain@example.com")

        call = await gql(USERS, token=token)

        assert call.error_code == "FORBIDDEN"
