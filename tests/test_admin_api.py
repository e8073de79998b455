"""
Integration tests for user administration endpoints.
"""

import pytest
import uuid
from httpx import AsyncClient
from fastapi import status

from estate_api.models.user import User, UserRole
from estate_api.models.property import PropertyStatus
from estate_api.repositories.user import UserRepository
from estate_api.repositories.property import PropertyRepository
from tests.conftest import UserFactory, PropertyFactory, at, auth_headers

USERS_URL = "/api/admin/users"


class TestListUsers:

    @pytest.mark.asyncio
    async def test_lists_all_users_newest_first(
        self,
        async_client: AsyncClient,
        admin_headers,
        user_repository: UserRepository
    ):
        older = await UserFactory.create_user(user_repository, created_at=at(2023, 1, 1))
        newer = await UserFactory.create_user(user_repository, created_at=at(2024, 1, 1))

        response = await async_client.get(USERS_URL, headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        ids = [u["id"] for u in response.json()]
        # The admin was created just now, so it comes first
        assert ids[1:] == [str(newer.id), str(older.id)]
        assert "X-Next-Cursor" not in response.headers
        assert all("hashedPassword" not in u for u in response.json())

    @pytest.mark.asyncio
    async def test_cursor_pagination(
        self,
        async_client: AsyncClient,
        admin_headers,
        user_repository: UserRepository
    ):
        for day in range(1, 5):
            await UserFactory.create_user(user_repository, created_at=at(2024, 1, day))

        full = (await async_client.get(USERS_URL, headers=admin_headers)).json()

        seen = []
        cursor = None
        while True:
            params = {"limit": 2}
            if cursor:
                params["cursor"] = cursor
            response = await async_client.get(USERS_URL, headers=admin_headers, params=params)
            assert response.status_code == status.HTTP_200_OK
            page = response.json()
            assert isinstance(page, list)
            seen.extend(u["id"] for u in page)
            cursor = response.headers.get("X-Next-Cursor")
            if not cursor:
                break

        assert seen == [u["id"] for u in full]

    @pytest.mark.asyncio
    async def test_invalid_cursor(self, async_client: AsyncClient, admin_headers):
        response = await async_client.get(USERS_URL, headers=admin_headers, params={"cursor": "not-a-cursor"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["message"] == "Invalid pagination cursor"

    @pytest.mark.asyncio
    async def test_requires_admin(self, async_client: AsyncClient, test_seller: User):
        response = await async_client.get(USERS_URL, headers=auth_headers(test_seller))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.asyncio
    async def test_inactive_admin_rejected(
        self,
        async_client: AsyncClient,
        admin_headers,
        test_admin: User,
        user_repository: UserRepository
    ):
        from estate_api.models.user import UserStatus
        await user_repository.update_user_status(test_admin.id, UserStatus.INACTIVE)

        response = await async_client.get(USERS_URL, headers=admin_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestDeleteUser:

    @pytest.mark.asyncio
    async def test_delete_existing_user(
        self,
        async_client: AsyncClient,
        admin_headers,
        test_buyer: User,
        user_repository: UserRepository
    ):
        response = await async_client.delete(f"{USERS_URL}/{test_buyer.id}", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"success": True, "message": "User deleted successfully"}
        assert await user_repository.get_by_id(test_buyer.id) is None

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, async_client: AsyncClient, admin_headers, test_buyer: User):
        first = await async_client.delete(f"{USERS_URL}/{test_buyer.id}", headers=admin_headers)
        second = await async_client.delete(f"{USERS_URL}/{test_buyer.id}", headers=admin_headers)

        assert first.status_code == second.status_code == status.HTTP_200_OK
        assert second.json()["success"] is True

    @pytest.mark.asyncio
    async def test_delete_unknown_user_succeeds(self, async_client: AsyncClient, admin_headers):
        response = await async_client.delete(f"{USERS_URL}/{uuid.uuid4()}", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["success"] is True

    @pytest.mark.asyncio
    async def test_delete_failure_returns_400(self, async_client: AsyncClient, admin_headers):
        response = await async_client.delete(f"{USERS_URL}/not-a-valid-id", headers=admin_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"success": False, "message": "Failed to delete user"}

    @pytest.mark.asyncio
    async def test_delete_leaves_properties_in_place(
        self,
        async_client: AsyncClient,
        admin_headers,
        test_seller: User,
        property_repository: PropertyRepository
    ):
        listing = await PropertyFactory.create_property(
            property_repository, test_seller.id, status=PropertyStatus.AVAILABLE
        )

        await async_client.delete(f"{USERS_URL}/{test_seller.id}", headers=admin_headers)

        assert await property_repository.get_by_id(listing.id) is not None


class TestUpdateUser:

    @pytest.mark.asyncio
    async def test_deactivate_user(self, async_client: AsyncClient, admin_headers, test_buyer: User):
        response = await async_client.patch(
            f"{USERS_URL}/{test_buyer.id}/status",
            headers=admin_headers,
            json={"status": "inactive"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "inactive"

        # The deactivated user's token stops working
        me = await async_client.get("/api/auth/me", headers=auth_headers(test_buyer))
        assert me.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.asyncio
    async def test_change_role(self, async_client: AsyncClient, admin_headers, test_buyer: User):
        response = await async_client.patch(
            f"{USERS_URL}/{test_buyer.id}/role",
            headers=admin_headers,
            json={"role": UserRole.EMPLOYEE.value}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["role"] == "employee"

    @pytest.mark.asyncio
    async def test_invalid_role(self, async_client: AsyncClient, admin_headers, test_buyer: User):
        response = await async_client.patch(
            f"{USERS_URL}/{test_buyer.id}/role",
            headers=admin_headers,
            json={"role": "landlord"}
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_update_missing_user(self, async_client: AsyncClient, admin_headers):
        response = await async_client.patch(
            f"{USERS_URL}/{uuid.uuid4()}/status",
            headers=admin_headers,
            json={"status": "inactive"}
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"]["code"] == "NOT_FOUND"
