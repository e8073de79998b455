"""
Tests for buyer workflows: browsing, favorites and purchases.
"""

import pytest
import uuid
from decimal import Decimal
from httpx import AsyncClient
from fastapi import status

from estate_api.models.user import User, UserRole
from estate_api.models.property import Property, PropertyStatus
from estate_api.repositories.user import UserRepository
from estate_api.repositories.property import PropertyRepository
from estate_api.repositories.purchase import PurchaseRepository
from estate_api.services.buyer import BuyerService
from estate_api.utils.exceptions import PropertyNotAvailableError
from tests.conftest import UserFactory, PropertyFactory, PurchaseFactory, at, auth_headers

BUYER_URL = "/api/buyer"


class TestAvailableProperties:

    @pytest.mark.asyncio
    async def test_only_available_listed(
        self,
        async_client: AsyncClient,
        buyer_headers,
        property_repository: PropertyRepository,
        test_seller: User
    ):
        available = await PropertyFactory.create_property(property_repository, test_seller.id, title="Open House")
        await PropertyFactory.create_property(property_repository, test_seller.id, status=PropertyStatus.PENDING)
        await PropertyFactory.create_property(property_repository, test_seller.id, status=PropertyStatus.SOLD)

        response = await async_client.get(f"{BUYER_URL}/properties", headers=buyer_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [p["id"] for p in data] == [str(available.id)]
        assert data[0]["seller"]["name"] == "Test Seller"

    @pytest.mark.asyncio
    async def test_requires_buyer_role(self, async_client: AsyncClient, admin_headers, test_seller: User):
        for headers in (admin_headers, auth_headers(test_seller)):
            response = await async_client.get(f"{BUYER_URL}/properties", headers=headers)
            assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.asyncio
    async def test_requires_authentication(self, async_client: AsyncClient):
        response = await async_client.get(f"{BUYER_URL}/properties")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestFavorites:

    @pytest.mark.asyncio
    async def test_add_list_remove(self, async_client: AsyncClient, buyer_headers, test_property: Property):
        added = await async_client.post(
            f"{BUYER_URL}/favorites", headers=buyer_headers, json={"propertyId": str(test_property.id)}
        )
        assert added.status_code == status.HTTP_201_CREATED
        assert added.json()["propertyId"] == str(test_property.id)
        assert added.json()["property"]["title"] == "Test Property"

        listed = await async_client.get(f"{BUYER_URL}/favorites", headers=buyer_headers)
        assert [f["propertyId"] for f in listed.json()] == [str(test_property.id)]

        removed = await async_client.delete(f"{BUYER_URL}/favorites/{test_property.id}", headers=buyer_headers)
        assert removed.status_code == status.HTTP_200_OK
        assert removed.json() == {"success": True, "message": "Property removed from favorites"}

        listed = await async_client.get(f"{BUYER_URL}/favorites", headers=buyer_headers)
        assert listed.json() == []

    @pytest.mark.asyncio
    async def test_add_twice_keeps_one(self, async_client: AsyncClient, buyer_headers, test_property: Property):
        body = {"propertyId": str(test_property.id)}
        first = await async_client.post(f"{BUYER_URL}/favorites", headers=buyer_headers, json=body)
        second = await async_client.post(f"{BUYER_URL}/favorites", headers=buyer_headers, json=body)

        assert first.status_code == second.status_code == status.HTTP_201_CREATED
        listed = await async_client.get(f"{BUYER_URL}/favorites", headers=buyer_headers)
        assert len(listed.json()) == 1

    @pytest.mark.asyncio
    async def test_add_missing_property(self, async_client: AsyncClient, buyer_headers):
        response = await async_client.post(
            f"{BUYER_URL}/favorites", headers=buyer_headers, json={"propertyId": str(uuid.uuid4())}
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_remove_unknown_favorite(self, async_client: AsyncClient, buyer_headers, test_property: Property):
        response = await async_client.delete(f"{BUYER_URL}/favorites/{test_property.id}", headers=buyer_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_favorites_are_per_buyer(
        self,
        async_client: AsyncClient,
        buyer_headers,
        user_repository: UserRepository,
        test_property: Property
    ):
        other = await UserFactory.create_user(user_repository, role=UserRole.BUYER)
        await async_client.post(
            f"{BUYER_URL}/favorites", headers=auth_headers(other), json={"propertyId": str(test_property.id)}
        )

        listed = await async_client.get(f"{BUYER_URL}/favorites", headers=buyer_headers)

        assert listed.json() == []


class TestPurchase:

    @pytest.mark.asyncio
    async def test_start_purchase_reserves_property(
        self,
        async_client: AsyncClient,
        buyer_headers,
        db_session,
        test_property: Property
    ):
        response = await async_client.post(
            f"{BUYER_URL}/purchase", headers=buyer_headers, json={"propertyId": str(test_property.id)}
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["propertyId"] == str(test_property.id)
        assert data["status"] == "pending"
        assert data["amount"] == 300000.0
        assert data["checkoutReference"].startswith("chk_")

        await db_session.refresh(test_property)
        assert test_property.status == PropertyStatus.PENDING

    @pytest.mark.asyncio
    async def test_second_purchase_conflicts(
        self,
        async_client: AsyncClient,
        buyer_headers,
        user_repository: UserRepository,
        test_property: Property
    ):
        body = {"propertyId": str(test_property.id)}
        await async_client.post(f"{BUYER_URL}/purchase", headers=buyer_headers, json=body)

        other = await UserFactory.create_user(user_repository, role=UserRole.BUYER)
        response = await async_client.post(f"{BUYER_URL}/purchase", headers=auth_headers(other), json=body)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert "pending" in response.json()["error"]["message"]

    @pytest.mark.asyncio
    async def test_purchase_sold_property(
        self,
        db_session,
        property_repository: PropertyRepository,
        test_seller: User,
        test_buyer: User
    ):
        sold = await PropertyFactory.create_property(property_repository, test_seller.id, status=PropertyStatus.SOLD)

        with pytest.raises(PropertyNotAvailableError):
            await BuyerService(db_session).start_purchase(test_buyer, sold.id)

    @pytest.mark.asyncio
    async def test_purchase_missing_property(self, async_client: AsyncClient, buyer_headers):
        response = await async_client.post(
            f"{BUYER_URL}/purchase", headers=buyer_headers, json={"propertyId": str(uuid.uuid4())}
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_purchase_invalid_id(self, async_client: AsyncClient, buyer_headers):
        response = await async_client.post(
            f"{BUYER_URL}/purchase", headers=buyer_headers, json={"propertyId": "abc"}
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_purchase_requires_buyer(self, async_client: AsyncClient, admin_headers, test_property: Property):
        response = await async_client.post(
            f"{BUYER_URL}/purchase", headers=admin_headers, json={"propertyId": str(test_property.id)}
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestPurchaseHistory:

    @pytest.mark.asyncio
    async def test_purchases_newest_first(
        self,
        async_client: AsyncClient,
        buyer_headers,
        purchase_repository: PurchaseRepository,
        test_buyer: User,
        test_property: Property
    ):
        older = await PurchaseFactory.create_purchase(
            purchase_repository, test_buyer.id, test_property.id, purchase_date=at(2024, 1, 1)
        )
        newer = await PurchaseFactory.create_purchase(
            purchase_repository, test_buyer.id, test_property.id,
            amount=Decimal("310000.00"), purchase_date=at(2024, 5, 1)
        )

        response = await async_client.get(f"{BUYER_URL}/purchases", headers=buyer_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [p["id"] for p in data] == [str(newer.id), str(older.id)]
        assert data[0]["amount"] == 310000.0
        assert data[0]["property"]["id"] == str(test_property.id)

    @pytest.mark.asyncio
    async def test_purchased_properties(
        self,
        async_client: AsyncClient,
        buyer_headers,
        purchase_repository: PurchaseRepository,
        test_buyer: User,
        test_property: Property
    ):
        await PurchaseFactory.create_purchase(purchase_repository, test_buyer.id, test_property.id)
        # Purchase of a listing that has since been removed
        await PurchaseFactory.create_purchase(purchase_repository, test_buyer.id, uuid.uuid4())

        for path in ("purchased-properties", "purchased"):
            response = await async_client.get(f"{BUYER_URL}/{path}", headers=buyer_headers)

            assert response.status_code == status.HTTP_200_OK
            assert [p["id"] for p in response.json()] == [str(test_property.id)]

    @pytest.mark.asyncio
    async def test_history_is_per_buyer(
        self,
        async_client: AsyncClient,
        buyer_headers,
        user_repository: UserRepository,
        purchase_repository: PurchaseRepository,
        test_property: Property
    ):
        other = await UserFactory.create_user(user_repository, role=UserRole.BUYER)
        await PurchaseFactory.create_purchase(purchase_repository, other.id, test_property.id)

        response = await async_client.get(f"{BUYER_URL}/purchases", headers=buyer_headers)

        assert response.json() == []
