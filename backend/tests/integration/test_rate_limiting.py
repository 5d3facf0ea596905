"""Integration tests for rate limiting middleware."""

import pytest
from httpx import AsyncClient

from infrastructure.database.models.user import User

pytestmark = pytest.mark.asyncio


class TestRateLimitingLogin:
    """Tests for rate limiting on login endpoint."""

    async def test_login_rate_limit_exceeded(self, async_client: AsyncClient, test_user: User):
        """Test that login endpoint is rate limited (5 requests per minute)."""
        for i in range(5):
            response = await async_client.post(
                "/api/v1/auth/login",
                json={"email": f"nonexistent{i}@example.com", "password": "WrongPass123"},
            )
            # Wrong credentials, not yet limited
            assert response.status_code == 401

        response = await async_client.post(
            "/api/v1/auth/login",
            json={"email": test_user.email, "password": "TestPass123"},
        )
        assert response.status_code == 429


class TestRateLimitingRegister:
    """Tests for rate limiting on register endpoint."""

    async def test_register_rate_limit_exceeded(self, async_client: AsyncClient):
        """Test that register endpoint is rate limited (3 requests per minute)."""
        for i in range(3):
            response = await async_client.post(
                "/api/v1/auth/register",
                json={
                    "email": f"newuser{i}@example.com",
                    "password": "SecurePass123",
                    "aadhaar": f"23456789012{i}",
                    "name": "Rate User",
                },
            )
            assert response.status_code == 201

        response = await async_client.post(
            "/api/v1/auth/register",
            json={
                "email": "newuser4@example.com",
                "password": "SecurePass123",
                "aadhaar": "234567890124",
                "name": "Rate User",
            },
        )
        assert response.status_code == 429


class TestRateLimitingDifferentEndpoints:
    """Tests that rate limits are independent per endpoint."""

    async def test_login_limit_does_not_block_register(self, async_client: AsyncClient):
        for i in range(6):
            await async_client.post(
                "/api/v1/auth/login",
                json={"email": f"user{i}@example.com", "password": "WrongPass123"},
            )

        response = await async_client.post(
            "/api/v1/auth/register",
            json={
                "email": "fresh@example.com",
                "password": "SecurePass123",
                "aadhaar": "345678901234",
            },
        )
        assert response.status_code == 201
