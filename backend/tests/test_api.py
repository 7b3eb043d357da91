"""
Quotely Backend — API Integration Tests
=========================================

What:  End-to-end HTTP tests through the full app (middleware, auth
       dependency, exception handlers, routers) on in-memory SQLite.
How:   HTTPX AsyncClient over ASGITransport; every test starts with an
       empty database and registers its own users.
"""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from quotely.models.quote import Quote
from quotely.models.tag import Tag
from quotely.models.user import User
from quotely.services.quote_repository import QuoteRepository
from quotely.services.token_issuer import TokenIssuer


async def register(client, email="reader@example.com", password="correct horse"):
    response = await client.post(
        "/api/auth/register", json={"email": email, "password": password}
    )
    assert response.status_code == 200, response.text
    return response.json()["token"]


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def create_quote(client, token, text="Less, but better.", **extra):
    response = await client.post(
        "/api/quotes", json={"text": text, **extra}, headers=bearer(token)
    )
    assert response.status_code == 201, response.text
    return response.json()


# ══════════════════════════════════════════════════════════════════════════
# Auth
# ══════════════════════════════════════════════════════════════════════════

class TestAuth:
    @pytest.mark.asyncio
    async def test_register_returns_usable_token(self, test_client):
        token = await register(test_client)

        response = await test_client.get("/api/quotes", headers=bearer(token))

        assert response.status_code == 200
        assert response.json() == {"items": []}

    @pytest.mark.asyncio
    async def test_duplicate_registration_is_400_conflict(self, test_client):
        await register(test_client)

        response = await test_client.post(
            "/api/auth/register",
            json={"email": "reader@example.com", "password": "another"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "conflict"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"email": "", "password": "pw"},
            {"email": "a@b.c", "password": "   "},
            {"email": None, "password": "pw"},
            {"email": "a@b.c", "password": None},
        ],
    )
    async def test_blank_registration_is_400(self, test_client, body):
        response = await test_client.post("/api/auth/register", json=body)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_login_with_correct_password(self, test_client):
        await register(test_client, password="s3cret")

        response = await test_client.post(
            "/api/auth/login", json={"email": "reader@example.com", "password": "s3cret"}
        )

        assert response.status_code == 200
        token = response.json()["token"]
        listing = await test_client.get("/api/quotes", headers=bearer(token))
        assert listing.status_code == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "email,password",
        [("reader@example.com", "wrong"), ("nobody@example.com", "s3cret")],
    )
    async def test_login_failure_is_401(self, test_client, email, password):
        await register(test_client, password="s3cret")

        response = await test_client.post(
            "/api/auth/login", json={"email": email, "password": password}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "auth_failure"


# ══════════════════════════════════════════════════════════════════════════
# Bearer authentication
# ══════════════════════════════════════════════════════════════════════════

class TestBearerAuth:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "headers",
        [{}, {"Authorization": "Bearer not-a-jwt"}, {"Authorization": "Basic abc"}],
    )
    async def test_missing_or_bad_token_is_401(self, test_client, headers):
        response = await test_client.get("/api/quotes", headers=headers)

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["error"] == "unauthenticated"

    @pytest.mark.asyncio
    async def test_token_signed_with_other_secret_is_401(self, test_client):
        forged = TokenIssuer(
            secret="a-completely-different-signing-secret-value",
            issuer="quotely-test",
            audience="quotely-test-clients",
        ).issue(User(id=uuid.uuid4(), email="reader@example.com"))

        response = await test_client.get("/api/quotes", headers=bearer(forged))

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_expired_token_is_401(self, app, test_client):
        issued = datetime.now(timezone.utc) - timedelta(days=8)
        expired = app.state.token_issuer.issue(
            User(id=uuid.uuid4(), email="reader@example.com"), now=issued
        )

        response = await test_client.post(
            "/api/quotes", json={"text": "too late"}, headers=bearer(expired)
        )

        assert response.status_code == 401
        assert "expired" in response.json()["message"]


# ══════════════════════════════════════════════════════════════════════════
# Quotes
# ══════════════════════════════════════════════════════════════════════════

class TestQuotes:
    @pytest.mark.asyncio
    async def test_create_returns_201_with_location_and_deduped_tags(self, test_client):
        token = await register(test_client)

        response = await test_client.post(
            "/api/quotes",
            json={
                "text": "Simplicity is prerequisite for reliability.",
                "sourceAuthor": "Edsger Dijkstra",
                "sourceUrl": "https://example.com/ewd",
                "tags": ["Inbox", "inbox", " inbox ", "engineering"],
            },
            headers=bearer(token),
        )

        assert response.status_code == 201
        body = response.json()
        assert response.headers["Location"] == f"/api/quotes/{body['id']}"
        assert body["sourceAuthor"] == "Edsger Dijkstra"
        assert body["sourceTitle"] is None
        assert sorted(t.casefold() for t in body["tags"]) == ["engineering", "inbox"]
        assert "createdAt" in body and "updatedAt" in body

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body", [{"text": "  ", "tags": ["x"]}, {"text": None}, {"tags": ["x"]}]
    )
    async def test_blank_or_missing_text_is_400(self, test_client, body):
        token = await register(test_client)

        response = await test_client.post("/api/quotes", json=body, headers=bearer(token))

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_update_with_null_text_is_400(self, test_client):
        token = await register(test_client)
        created = await create_quote(test_client, token)

        response = await test_client.put(
            f"/api/quotes/{created['id']}", json={"text": None}, headers=bearer(token)
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_list_is_newest_first(self, test_client):
        token = await register(test_client)
        first = await create_quote(test_client, token, "first")
        second = await create_quote(test_client, token, "second")

        response = await test_client.get("/api/quotes", headers=bearer(token))

        ids = [q["id"] for q in response.json()["items"]]
        assert ids == [second["id"], first["id"]]

    @pytest.mark.asyncio
    async def test_random_with_no_quotes_is_404(self, test_client):
        token = await register(test_client)

        response = await test_client.get("/api/quotes/random", headers=bearer(token))

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_random_tag_filter(self, test_client):
        token = await register(test_client)
        tagged = await create_quote(test_client, token, "tagged", tags=["Work"])
        await create_quote(test_client, token, "plain")

        hit = await test_client.get(
            "/api/quotes/random", params={"tag": "Work"}, headers=bearer(token)
        )
        miss = await test_client.get(
            "/api/quotes/random", params={"tag": "work"}, headers=bearer(token)
        )

        assert hit.status_code == 200
        assert hit.json()["id"] == tagged["id"]
        assert miss.status_code == 404

    @pytest.mark.asyncio
    async def test_update_replaces_fields_and_tags(self, test_client):
        token = await register(test_client)
        created = await create_quote(test_client, token, "draft", note="n", tags=["a", "b"])

        response = await test_client.put(
            f"/api/quotes/{created['id']}",
            json={"text": "final", "tags": ["b", "c"]},
            headers=bearer(token),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["text"] == "final"
        assert body["note"] is None
        assert body["tags"] == ["b", "c"]
        assert body["createdAt"] == created["createdAt"]

        fetched = await test_client.get(f"/api/quotes/{created['id']}", headers=bearer(token))
        assert fetched.json()["tags"] == ["b", "c"]

    @pytest.mark.asyncio
    async def test_delete_then_get_is_404(self, test_client):
        token = await register(test_client)
        created = await create_quote(test_client, token)

        deleted = await test_client.delete(f"/api/quotes/{created['id']}", headers=bearer(token))
        fetched = await test_client.get(f"/api/quotes/{created['id']}", headers=bearer(token))

        assert deleted.status_code == 204
        assert deleted.content == b""
        assert fetched.status_code == 404

    @pytest.mark.asyncio
    async def test_other_users_quote_is_404_everywhere(self, test_client):
        owner = await register(test_client, "owner@example.com")
        intruder = await register(test_client, "intruder@example.com")
        created = await create_quote(test_client, owner, tags=["secret"])
        url = f"/api/quotes/{created['id']}"

        assert (await test_client.get(url, headers=bearer(intruder))).status_code == 404
        put = await test_client.put(url, json={"text": "mine now"}, headers=bearer(intruder))
        assert put.status_code == 404
        assert (await test_client.delete(url, headers=bearer(intruder))).status_code == 404

        listing = await test_client.get("/api/quotes", headers=bearer(intruder))
        assert listing.json() == {"items": []}
        random_pick = await test_client.get(
            "/api/quotes/random", params={"tag": "secret"}, headers=bearer(intruder)
        )
        assert random_pick.status_code == 404

        still_there = await test_client.get(url, headers=bearer(owner))
        assert still_there.json()["text"] == "Less, but better."


# ══════════════════════════════════════════════════════════════════════════
# Transactions
# ══════════════════════════════════════════════════════════════════════════

async def count_rows(app, model) -> int:
    async with app.state.session_factory() as session:
        result = await session.execute(select(func.count()).select_from(model))
        return result.scalar_one()


class TestTransactions:
    @pytest.mark.asyncio
    async def test_failed_create_leaves_no_quote_and_no_new_tag(self, app, test_client):
        token = await register(test_client)

        with patch.object(
            QuoteRepository, "_associate", side_effect=RuntimeError("connection reset")
        ):
            response = await test_client.post(
                "/api/quotes",
                json={"text": "half written", "tags": ["brand-new"]},
                headers=bearer(token),
            )

        assert response.status_code == 500
        assert response.json()["error"] == "server_error"
        assert "connection reset" not in response.text
        assert await count_rows(app, Quote) == 0
        assert await count_rows(app, Tag) == 0

    @pytest.mark.asyncio
    async def test_failed_update_keeps_previous_text_and_tags(self, app, test_client):
        token = await register(test_client)
        created = await create_quote(test_client, token, "original", tags=["old"])

        with patch.object(
            QuoteRepository, "_associate", side_effect=RuntimeError("connection reset")
        ):
            response = await test_client.put(
                f"/api/quotes/{created['id']}",
                json={"text": "changed", "tags": ["new"]},
                headers=bearer(token),
            )

        assert response.status_code == 500
        fetched = await test_client.get(f"/api/quotes/{created['id']}", headers=bearer(token))
        assert fetched.json()["text"] == "original"
        assert fetched.json()["tags"] == ["old"]
        assert await count_rows(app, Tag) == 1


# ══════════════════════════════════════════════════════════════════════════
# Health & plumbing
# ══════════════════════════════════════════════════════════════════════════

class TestHealth:
    @pytest.mark.asyncio
    async def test_health_reports_connected_database(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"
