"""
Tests for the /api/candidates endpoints.
"""
import io

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from talentdesk.database import get_db
from talentdesk.main import app
from talentdesk.routers.candidates import get_candidate_store
from talentdesk.services.candidate_store import CandidateStore

HEADERS = {"X-User-Id": "rec-1", "X-User-Name": "Asha Rao", "X-User-Email": "asha@talentdesk.in"}
XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@pytest_asyncio.fixture
async def client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            yield session
            await session.commit()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_candidate_store] = lambda: CandidateStore(session_maker)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _create(client, **fields):
    payload = {"name": "Ravi Kumar", "email": "Ravi@Example.com"}
    payload.update(fields)
    response = await client.post("/api/candidates", json=payload, headers=HEADERS)
    assert response.status_code == 201, response.text
    return response.json()


class TestIdentity:

    async def test_missing_identity(self, client):
        response = await client.get("/api/candidates")
        assert response.status_code == 401
        assert response.json()["detail"] == "Missing user identity"

    async def test_health(self, client):
        response = await client.get("/health")
        assert response.json() == {"status": "healthy"}


class TestCandidateCrud:

    async def test_create(self, client):
        data = await _create(client, skills="Java, Spring")

        assert data["candidate_id"] == "VTS0000001"
        assert data["email"] == "ravi@example.com"
        assert data["skills"] == ["Java", "Spring"]
        assert data["status"] == ["Submitted"]
        assert data["recruiter_id"] == "rec-1"
        assert data["recruiter_name"] == "Asha Rao"

    async def test_create_rejects_unknown_status(self, client):
        response = await client.post(
            "/api/candidates",
            json={"name": "Ravi", "email": "ravi@example.com", "status": ["Interviewing"]},
            headers=HEADERS,
        )
        assert response.status_code == 400

    async def test_list_newest_first(self, client):
        await _create(client, email="first@example.com")
        await _create(client, email="second@example.com")

        response = await client.get("/api/candidates", headers=HEADERS)

        assert response.status_code == 200
        assert [c["email"] for c in response.json()] == ["second@example.com", "first@example.com"]
        assert response.headers["cache-control"] == "no-cache, no-store, must-revalidate"

    async def test_list_filters(self, client):
        created = await _create(client, email="a@example.com")
        await client.put(f"/api/candidates/{created['id']}", json={"active": False}, headers=HEADERS)
        await _create(client, email="b@example.com")

        response = await client.get("/api/candidates", params={"active": "true"}, headers=HEADERS)
        assert [c["email"] for c in response.json()] == ["b@example.com"]

        response = await client.get("/api/candidates", params={"recruiter_id": "someone-else"}, headers=HEADERS)
        assert response.json() == []

    async def test_get_and_404(self, client):
        created = await _create(client)

        response = await client.get(f"/api/candidates/{created['id']}", headers=HEADERS)
        assert response.json()["name"] == "Ravi Kumar"

        response = await client.get("/api/candidates/9999", headers=HEADERS)
        assert response.status_code == 404

    async def test_partial_update(self, client):
        created = await _create(client, position="Java Developer")

        response = await client.put(
            f"/api/candidates/{created['id']}",
            json={"client": "Acme", "email": " NEW@Example.com "},
            headers=HEADERS,
        )

        data = response.json()
        assert data["client"] == "Acme"
        assert data["position"] == "Java Developer"
        assert data["email"] == "new@example.com"

    async def test_delete(self, client):
        created = await _create(client)

        response = await client.delete(f"/api/candidates/{created['id']}", headers=HEADERS)
        assert response.status_code == 200

        response = await client.get(f"/api/candidates/{created['id']}", headers=HEADERS)
        assert response.status_code == 404


class TestStatusAndRemarks:

    async def test_stage_status(self, client):
        created = await _create(client)

        response = await client.put(
            f"/api/candidates/{created['id']}/status", json={"status": "Selected"}, headers=HEADERS
        )

        assert response.status_code == 200
        assert response.json()["candidate"]["status"] == ["Selected"]

    async def test_round_result_status(self, client):
        created = await _create(client)

        response = await client.put(
            f"/api/candidates/{created['id']}/status",
            json={"level": "L2", "outcome": "SELECT"},
            headers=HEADERS,
        )

        assert response.json()["candidate"]["status"] == ["L2 - SELECT"]

    async def test_invalid_status(self, client):
        created = await _create(client)

        response = await client.put(
            f"/api/candidates/{created['id']}/status", json={"status": "Maybe"}, headers=HEADERS
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid status format"

    async def test_remarks(self, client):
        created = await _create(client)

        response = await client.put(
            f"/api/candidates/{created['id']}/remarks", json={"remarks": "Call after 6pm"}, headers=HEADERS
        )

        assert response.json()["candidate"]["remarks"] == "Call after 6pm"

    async def test_inline_update_remarks_only(self, client):
        created = await _create(client)

        response = await client.put(
            f"/api/candidates/{created['id']}/inline-update", json={"remarks": "Good fit"}, headers=HEADERS
        )

        candidate = response.json()["candidate"]
        assert candidate["remarks"] == "Good fit"
        assert candidate["status"] == ["Submitted"]

    async def test_inline_update_both(self, client):
        created = await _create(client)

        response = await client.put(
            f"/api/candidates/{created['id']}/inline-update",
            json={"level": "L1", "outcome": "HOLD", "remarks": ""},
            headers=HEADERS,
        )

        candidate = response.json()["candidate"]
        assert candidate["status"] == ["L1 - HOLD"]
        assert candidate["remarks"] == ""


class TestResumeUpload:

    async def test_unsupported_file(self, client):
        response = await client.post(
            "/api/candidates/parse-resume",
            files={"resume": ("notes.txt", b"plain text", "text/plain")},
            headers=HEADERS,
        )

        body = response.json()
        assert response.status_code == 200
        assert body["success"] is False
        assert body["message"].startswith("Could not parse resume")
        assert body["data"] == {}

    async def test_docx_resume(self, client):
        from docx import Document

        document = Document()
        document.add_paragraph("Ravi Kumar")
        document.add_paragraph("ravi@example.com, Hyderabad")
        buffer = io.BytesIO()
        document.save(buffer)

        response = await client.post(
            "/api/candidates/parse-resume",
            files={"resume": ("ravi.docx", buffer.getvalue(), "application/octet-stream")},
            headers=HEADERS,
        )

        body = response.json()
        assert body["success"] is True
        assert body["data"]["name"] == "Ravi Kumar"
        assert body["data"]["email"] == "ravi@example.com"
        assert body["data"]["current_location"] == "Hyderabad"

    async def test_size_limit(self, client, monkeypatch):
        from talentdesk.routers import candidates

        monkeypatch.setattr(candidates.settings, "max_upload_mb", 0)

        response = await client.post(
            "/api/candidates/parse-resume",
            files={"resume": ("cv.pdf", b"%PDF-1.4", "application/pdf")},
            headers=HEADERS,
        )

        assert response.status_code == 400


class TestBulkImportEndpoint:

    async def test_import(self, client, make_workbook):
        content = make_workbook([
            ["Name", "Email", "Phone", "Skills"],
            ["Jane Doe", None, "98765-43210", "React, Node"],
            ["Ravi Kumar", "ravi@example.com", "9876543210", "Java"],
        ])

        response = await client.post(
            "/api/candidates/bulk-import",
            files={"file": ("candidates.xlsx", content, XLSX)},
            headers=HEADERS,
        )

        body = response.json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["created"] == 2
        assert body["errors"] == []

        listing = await client.get("/api/candidates", headers=HEADERS)
        assert {c["candidate_id"] for c in listing.json()} == {"VTS0000001", "VTS0000002"}

    async def test_wrong_file_type(self, client):
        response = await client.post(
            "/api/candidates/bulk-import",
            files={"file": ("candidates.csv", b"Name,Email", "text/csv")},
            headers=HEADERS,
        )
        assert response.status_code == 400

    async def test_empty_sheet(self, client, make_workbook):
        response = await client.post(
            "/api/candidates/bulk-import",
            files={"file": ("candidates.xlsx", make_workbook([["Name", "Email"]]), XLSX)},
            headers=HEADERS,
        )

        assert response.status_code == 400
        assert response.json()["success"] is False


class TestBulkAssign:

    async def test_reassigns_selected_candidates(self, client):
        first = await _create(client, email="a@example.com")
        second = await _create(client, email="b@example.com")
        untouched = await _create(client, email="c@example.com")

        response = await client.put(
            "/api/candidates/bulk-assign",
            json={
                "candidate_ids": [first["id"], second["id"]],
                "recruiter_id": "rec-2",
                "recruiter_name": "Kiran Das",
            },
            headers=HEADERS,
        )

        body = response.json()
        assert response.status_code == 200
        assert body["assigned"] == 2
        assert body["message"] == "Successfully assigned 2 candidates to Kiran Das"

        listing = (await client.get("/api/candidates", params={"recruiter_id": "rec-2"}, headers=HEADERS)).json()
        assert {c["id"] for c in listing} == {first["id"], second["id"]}
        assert all(c["recruiter_name"] == "Kiran Das" for c in listing)

        response = await client.get(f"/api/candidates/{untouched['id']}", headers=HEADERS)
        assert response.json()["recruiter_id"] == "rec-1"

    async def test_requires_candidates(self, client):
        response = await client.put(
            "/api/candidates/bulk-assign",
            json={"candidate_ids": [], "recruiter_id": "rec-2"},
            headers=HEADERS,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "No candidates selected"

    async def test_requires_target_recruiter(self, client):
        created = await _create(client)

        response = await client.put(
            "/api/candidates/bulk-assign",
            json={"candidate_ids": [created["id"]]},
            headers=HEADERS,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Target recruiter is required"
