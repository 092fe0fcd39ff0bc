"""
Bookstore Backend — API Endpoint Tests
========================================

What:  HTTP behavior end to end through the FastAPI app: envelopes, status
       codes, authentication, and the order placement scenario.
How:   httpx AsyncClient over ASGITransport; the database dependency is
       overridden with the per-test SQLite database (see conftest.py).
"""

from uuid import uuid4

import pytest
from sqlalchemy import select

from bookstore.models import Book
from bookstore.security import create_access_token


async def stock_of(session_factory, book_id):
    async with session_factory() as db:
        return (await db.execute(select(Book.stock_quantity).where(Book.id == book_id))).scalar_one()


def assert_error(response, status, kind):
    assert response.status_code == status
    body = response.json()
    assert body["success"] is False
    assert body["error"] == kind
    assert body["message"]
    assert "request_id" in body
    return body


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_check(self, test_client):
        response = await test_client.get("/health-check")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["database"] == "connected"
        assert "X-Request-ID" in response.headers

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/health-check", headers={"X-Request-ID": "trace-42"})
        assert response.headers["X-Request-ID"] == "trace-42"


class TestAuthEndpoints:

    @pytest.mark.asyncio
    async def test_register_login_me(self, test_client, seed):
        response = await test_client.post(
            "/auth/register", json={"email": "buyer@example.com", "password": "pw-98765"}
        )
        assert response.status_code == 201
        assert response.json()["data"]["email"] == "buyer@example.com"
        assert "password_hash" not in response.json()["data"]

        response = await test_client.post(
            "/auth/login", json={"email": "buyer@example.com", "password": "pw-98765"}
        )
        assert response.status_code == 200
        token = response.json()["data"]["access_token"]

        response = await test_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json()["data"]["email"] == "buyer@example.com"

    @pytest.mark.asyncio
    async def test_register_duplicate(self, test_client, seed):
        response = await test_client.post(
            "/auth/register", json={"email": seed.email, "password": "pw"}
        )
        assert_error(response, 400, "conflict")

    @pytest.mark.asyncio
    async def test_register_invalid_email_is_400(self, test_client, seed):
        response = await test_client.post("/auth/register", json={"email": "nope", "password": "pw"})
        assert_error(response, 400, "validation_error")

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, test_client, seed):
        response = await test_client.post(
            "/auth/login", json={"email": seed.email, "password": "wrong"}
        )
        body = assert_error(response, 401, "unauthorized")
        assert body["message"] == "Invalid credentials"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "headers",
        [{}, {"Authorization": "Bearer not-a-token"}, {"Authorization": "Basic abc"}],
    )
    async def test_me_requires_valid_token(self, test_client, seed, headers):
        response = await test_client.get("/auth/me", headers=headers)
        assert_error(response, 401, "unauthorized")


class TestGenreEndpoints:

    @pytest.mark.asyncio
    async def test_list_is_public(self, test_client, seed):
        response = await test_client.get("/genre", params={"orderByName": "asc"})
        assert response.status_code == 200
        body = response.json()
        assert [g["name"] for g in body["data"]] == ["Fantasy", "Horror"]
        assert body["meta"]["total"] == 2

    @pytest.mark.asyncio
    async def test_create_requires_auth(self, test_client, seed):
        response = await test_client.post("/genre", json={"name": "Poetry"})
        assert_error(response, 401, "unauthorized")

    @pytest.mark.asyncio
    async def test_crud(self, test_client, seed, auth_headers):
        response = await test_client.post("/genre", json={"name": "Poetry"}, headers=auth_headers)
        assert response.status_code == 201
        genre_id = response.json()["data"]["id"]

        response = await test_client.patch(
            f"/genre/{genre_id}", json={"name": "Verse"}, headers=auth_headers
        )
        assert response.json()["data"]["name"] == "Verse"

        response = await test_client.delete(f"/genre/{genre_id}", headers=auth_headers)
        assert response.json() == {"success": True, "message": "Genre removed successfully"}

        response = await test_client.get(f"/genre/{genre_id}")
        assert_error(response, 404, "not_found")

    @pytest.mark.asyncio
    async def test_bad_limit_is_400(self, test_client, seed):
        response = await test_client.get("/genre", params={"limit": 0})
        assert_error(response, 400, "validation_error")


class TestBookEndpoints:

    @pytest.mark.asyncio
    async def test_requires_auth(self, test_client, seed):
        response = await test_client.get("/books")
        assert_error(response, 401, "unauthorized")

    @pytest.mark.asyncio
    async def test_create_and_fetch(self, test_client, seed, auth_headers):
        payload = {
            "title": "Carrie",
            "writer": "Stephen King",
            "publisher": "Doubleday",
            "publication_year": 1974,
            "price": "7.25",
            "stock_quantity": 3,
            "genre_id": str(seed.horror_id),
        }
        response = await test_client.post("/books", json=payload, headers=auth_headers)
        assert response.status_code == 201
        book_id = response.json()["data"]["id"]

        response = await test_client.get(f"/books/{book_id}", headers=auth_headers)
        data = response.json()["data"]
        assert data["title"] == "Carrie"
        assert data["genre"]["name"] == "Horror"

    @pytest.mark.asyncio
    async def test_list_by_genre_sorted_by_title(self, test_client, seed, auth_headers):
        response = await test_client.get(
            f"/books/genre/{seed.fantasy_id}",
            params={"orderByTitle": "asc"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert [b["title"] for b in response.json()["data"]] == ["Dune", "The Hobbit"]

    @pytest.mark.asyncio
    async def test_patch_ignores_non_whitelisted_fields(self, test_client, seed, auth_headers):
        book_id = seed.books["it"]
        response = await test_client.patch(
            f"/books/{book_id}",
            json={"title": "Renamed", "stock_quantity": 12},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["title"] == "It"

    @pytest.mark.asyncio
    async def test_unknown_book(self, test_client, seed, auth_headers):
        response = await test_client.get(f"/books/{uuid4()}", headers=auth_headers)
        assert_error(response, 404, "not_found")


class TestTransactionEndpoints:

    @pytest.mark.asyncio
    async def test_order_scenario(self, test_client, session_factory, seed, auth_headers):
        hobbit = str(seed.books["hobbit"])

        response = await test_client.post(
            "/transactions",
            json={"items": [{"book_id": hobbit, "quantity": 3}]},
            headers=auth_headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Transaction (Order) created successfully"
        assert body["data"]["user_id"] == str(seed.user_id)
        assert body["data"]["items"][0]["quantity"] == 3
        assert await stock_of(session_factory, seed.books["hobbit"]) == 2

        response = await test_client.post(
            "/transactions",
            json={"items": [{"book_id": hobbit, "quantity": 10}]},
            headers=auth_headers,
        )
        body = assert_error(response, 400, "insufficient_stock")
        assert "The Hobbit" in body["message"]
        assert await stock_of(session_factory, seed.books["hobbit"]) == 2

    @pytest.mark.asyncio
    async def test_requires_auth(self, test_client, seed):
        response = await test_client.post(
            "/transactions", json={"items": [{"book_id": str(seed.books["it"]), "quantity": 1}]}
        )
        assert_error(response, 401, "unauthorized")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{}, {"items": []}])
    async def test_empty_items(self, test_client, seed, auth_headers, payload):
        response = await test_client.post("/transactions", json=payload, headers=auth_headers)
        body = assert_error(response, 400, "validation_error")
        assert body["message"] == "Items are required"

    @pytest.mark.asyncio
    async def test_unknown_book_names_the_id(self, test_client, session_factory, seed, auth_headers):
        missing = str(uuid4())
        response = await test_client.post(
            "/transactions",
            json={"items": [{"book_id": str(seed.books["it"]), "quantity": 1}, {"book_id": missing, "quantity": 1}]},
            headers=auth_headers,
        )
        body = assert_error(response, 404, "not_found")
        assert missing in body["message"]
        assert await stock_of(session_factory, seed.books["it"]) == 10

    @pytest.mark.asyncio
    async def test_list_detail_and_statistics(self, test_client, seed, auth_headers):
        response = await test_client.post(
            "/transactions",
            json={"items": [{"book_id": str(seed.books["it"]), "quantity": 2}]},
            headers=auth_headers,
        )
        order_id = response.json()["data"]["id"]

        response = await test_client.get("/transactions", headers=auth_headers)
        assert [o["id"] for o in response.json()["data"]] == [order_id]

        response = await test_client.get(f"/transactions/{order_id}", headers=auth_headers)
        detail = response.json()["data"]
        assert detail["user"]["email"] == seed.email
        assert detail["items"][0]["book"]["title"] == "It"

        response = await test_client.get("/transactions/statistics", headers=auth_headers)
        assert response.status_code == 200
        stats = response.json()["data"]
        assert stats["totalTransactions"] == 1
        assert stats["mostGenre"]["genre_name"] == "Horror"
        assert stats["leastGenre"]["txn_count"] == 1

    @pytest.mark.asyncio
    async def test_statistics_without_orders(self, test_client, seed, auth_headers):
        response = await test_client.get("/transactions/statistics", headers=auth_headers)
        assert response.json()["data"] == {
            "totalTransactions": 0,
            "mostGenre": None,
            "leastGenre": None,
        }

    @pytest.mark.asyncio
    async def test_unknown_transaction(self, test_client, seed, auth_headers):
        response = await test_client.get("/transactions/not-a-uuid", headers=auth_headers)
        body = assert_error(response, 404, "not_found")
        assert body["message"] == "Transaction not found"


class TestStaleToken:

    @pytest.mark.asyncio
    async def test_order_with_token_for_missing_user(self, test_client, session_factory, seed):
        headers = {"Authorization": f"Bearer {create_access_token(str(uuid4()))}"}
        response = await test_client.post(
            "/transactions",
            json={"items": [{"book_id": str(seed.books["it"]), "quantity": 1}]},
            headers=headers,
        )
        assert_error(response, 401, "unauthorized")
        assert await stock_of(session_factory, seed.books["it"]) == 10

    @pytest.mark.asyncio
    async def test_register_username_too_long(self, test_client, seed):
        response = await test_client.post(
            "/auth/register",
            json={"email": "long@example.com", "password": "pw", "username": "u" * 101},
        )
        assert_error(response, 400, "validation_error")
