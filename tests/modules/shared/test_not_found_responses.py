"""
HTTP tests for out-of-scope lookups.

A row that exists in another school must answer exactly like a row that
does not exist at all, so ids from other tenants cannot be discovered.
"""

from unittest.mock import MagicMock

import httpx
import pytest
import pytest_asyncio

from edutrack.core.auth import get_current_actor
from edutrack.core.database import get_db
from edutrack.main import app

SCHOOL_ID = "11111111-1111-1111-1111-111111111111"
OTHER_SCHOOL_ID = "22222222-2222-2222-2222-222222222222"
FORBIDDEN_ID = "33333333-3333-3333-3333-333333333333"
MISSING_ID = "44444444-4444-4444-4444-444444444444"

# id -> owning school of every row in the fake database
ROWS = {FORBIDDEN_ID: OTHER_SCHOOL_ID}


class FakeSession:
    """Answers scoped lookups from ROWS using the bound query parameters."""

    def __init__(self):
        self.queries = []

    async def execute(self, query):
        params = {str(value) for value in query.compile().params.values()}
        self.queries.append(params)
        found = any(
            row_id in params and school_id in params for row_id, school_id in ROWS.items()
        )
        result = MagicMock()
        result.scalar_one_or_none.return_value = MagicMock() if found else None
        return result


@pytest.fixture
def session():
    return FakeSession()


@pytest_asyncio.fixture
async def client(session, principal):
    async def override_db():
        yield session

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_current_actor] = lambda: principal

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http

    app.dependency_overrides.clear()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path, message",
    [
        ("/api/v1/classes/{id}", "Class not found"),
        ("/api/v1/students/{id}", "Student not found"),
        ("/api/v1/fees/structures/{id}", "Fee structure not found"),
    ],
)
async def test_other_school_row_looks_missing(client, session, path, message):
    """Another school's row and an unknown id give the same 404."""
    forbidden = await client.get(path.format(id=FORBIDDEN_ID))
    missing = await client.get(path.format(id=MISSING_ID))

    assert forbidden.status_code == missing.status_code == 404
    assert forbidden.json() == missing.json()
    assert forbidden.json() == {"detail": {"error": "NOT_FOUND", "message": message}}
    assert len(session.queries) == 2
    assert all(SCHOOL_ID in params for params in session.queries)


@pytest.mark.asyncio
async def test_null_in_update_is_rejected(client, session):
    """A null for a required field is a 400 before any lookup."""
    response = await client.put(f"/api/v1/classes/{MISSING_ID}", json={"name": None})

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "VALIDATION_ERROR"
    assert session.queries == []
