"""
Tests for registration, login, token refresh and the current-user endpoint.
"""

import pytest
from datetime import timedelta
from httpx import AsyncClient
from fastapi import status

from estate_api.models.user import User, UserStatus
from estate_api.repositories.user import UserRepository
from estate_api.services.auth import AuthService
from estate_api.utils.auth import create_access_token, create_refresh_token
from estate_api.utils.exceptions import InvalidCredentialsError, ValidationError
from tests.conftest import UserFactory, TEST_PASSWORD, auth_headers

AUTH_URL = "/api/auth"


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_buyer(self, async_client: AsyncClient):
        response = await async_client.post(f"{AUTH_URL}/register", json={
            "name": "New Buyer",
            "email": "New.Buyer@Example.com",
            "password": "password123"
        })

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["email"] == "new.buyer@example.com"
        assert data["role"] == "buyer"
        assert data["status"] == "active"
        assert "password" not in data and "hashedPassword" not in data

    @pytest.mark.asyncio
    async def test_register_seller(self, async_client: AsyncClient):
        response = await async_client.post(f"{AUTH_URL}/register", json={
            "name": "New Seller",
            "email": "new.seller@example.com",
            "password": "password123",
            "role": "seller"
        })

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["role"] == "seller"

    @pytest.mark.asyncio
    async def test_cannot_self_register_as_admin(self, async_client: AsyncClient):
        for role in ("admin", "employee"):
            response = await async_client.post(f"{AUTH_URL}/register", json={
                "name": "Sneaky",
                "email": f"{role}@example.com",
                "password": "password123",
                "role": role
            })

            assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_duplicate_email(self, async_client: AsyncClient, test_buyer: User):
        response = await async_client.post(f"{AUTH_URL}/register", json={
            "name": "Copy",
            "email": test_buyer.email,
            "password": "password123"
        })

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"]["code"] == "CONFLICT"

    @pytest.mark.asyncio
    async def test_weak_password(self, async_client: AsyncClient):
        for password in ("short1", "onlyletters", "12345678"):
            response = await async_client.post(f"{AUTH_URL}/register", json={
                "name": "Weak",
                "email": "weak@example.com",
                "password": password
            })

            assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_success(self, async_client: AsyncClient, test_admin: User):
        response = await async_client.post(f"{AUTH_URL}/login", json={
            "email": "ADMIN@test.com",
            "password": TEST_PASSWORD
        })

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["tokenType"] == "bearer"
        assert data["expiresIn"] > 0
        assert data["user"]["id"] == str(test_admin.id)

        me = await async_client.get(
            f"{AUTH_URL}/me", headers={"Authorization": f"Bearer {data['accessToken']}"}
        )
        assert me.json()["role"] == "admin"

    @pytest.mark.asyncio
    async def test_wrong_password(self, async_client: AsyncClient, test_buyer: User):
        response = await async_client.post(f"{AUTH_URL}/login", json={
            "email": test_buyer.email,
            "password": "wrongpassword1"
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"]["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_unknown_email(self, async_client: AsyncClient):
        response = await async_client.post(f"{AUTH_URL}/login", json={
            "email": "nobody@example.com",
            "password": TEST_PASSWORD
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_inactive_user(self, async_client: AsyncClient, user_repository: UserRepository):
        user = await UserFactory.create_user(user_repository, status=UserStatus.INACTIVE)

        response = await async_client.post(f"{AUTH_URL}/login", json={
            "email": user.email,
            "password": TEST_PASSWORD
        })

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error"]["message"] == "User account is inactive"

    @pytest.mark.asyncio
    async def test_service_rejects_blank_fields(self, db_session):
        service = AuthService(db_session)

        with pytest.raises(ValidationError):
            await service.authenticate_user("  ", TEST_PASSWORD)
        with pytest.raises(ValidationError):
            await service.authenticate_user("someone@example.com", "")

    @pytest.mark.asyncio
    async def test_service_wrong_password(self, db_session, test_buyer: User):
        with pytest.raises(InvalidCredentialsError):
            await AuthService(db_session).authenticate_user(test_buyer.email, "wrongpassword1")


class TestTokens:

    @pytest.mark.asyncio
    async def test_refresh(self, async_client: AsyncClient, test_buyer: User):
        refresh_token = create_refresh_token(user_id=test_buyer.id, email=test_buyer.email)

        response = await async_client.post(f"{AUTH_URL}/refresh", json={"refreshToken": refresh_token})

        assert response.status_code == status.HTTP_200_OK
        access_token = response.json()["accessToken"]
        me = await async_client.get(f"{AUTH_URL}/me", headers={"Authorization": f"Bearer {access_token}"})
        assert me.json()["email"] == test_buyer.email

    @pytest.mark.asyncio
    async def test_access_token_cannot_refresh(self, async_client: AsyncClient, test_buyer: User):
        access_token = create_access_token(user_id=test_buyer.id, email=test_buyer.email, role=test_buyer.role)

        response = await async_client.post(f"{AUTH_URL}/refresh", json={"refreshToken": access_token})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_invalid_token(self, async_client: AsyncClient):
        response = await async_client.get(f"{AUTH_URL}/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_expired_token(self, async_client: AsyncClient, test_buyer: User):
        token = create_access_token(
            user_id=test_buyer.id,
            email=test_buyer.email,
            role=test_buyer.role,
            expires_delta=timedelta(seconds=-1)
        )

        response = await async_client.get(f"{AUTH_URL}/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"]["message"] == "Token has expired"

    @pytest.mark.asyncio
    async def test_token_of_deleted_user(
        self,
        async_client: AsyncClient,
        user_repository: UserRepository,
        test_buyer: User
    ):
        headers = auth_headers(test_buyer)
        await user_repository.delete(test_buyer.id)

        response = await async_client.get(f"{AUTH_URL}/me", headers=headers)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"]["message"] == "User no longer exists"
