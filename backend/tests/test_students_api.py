"""
Student Registry Backend: HTTP Endpoint Tests
===============================================

What:  End-to-end tests of the CRUD routes against a real temporary SQLite store.
How:   HTTPX AsyncClient over ASGITransport; the `app` fixture enters the
       lifespan so the `students` table exists before each test.

What we test:
    ✅ Create → fetch round trip, for form, multipart and JSON bodies
    ✅ 400 for missing names and malformed age, with no row written
    ✅ 404 for unknown ids on get/replace/delete, whatever the body
    ✅ Replace overwrites every mutable field
    ✅ Error body shape, request IDs, health check, store failure → 500
    ✅ Access log lines, store opened and closed by the lifespan
"""

import logging

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from httpx import AsyncClient, ASGITransport
from sqlalchemy.exc import OperationalError

from student_registry.database import Database, get_database, get_db_session
from student_registry.main import create_app


async def _create(client, **fields):
    response = await client.post("/students", data=fields)
    assert response.status_code == 201, response.text
    return response.json()["id"]


class TestCreateAndFetch:

    @pytest.mark.asyncio
    async def test_create_then_get_returns_same_values(self, test_client):
        response = await test_client.post(
            "/students", data={"firstname": "Ana", "lastname": "Lopez", "age": "23"}
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Student created successfully"
        assert body["id"] == 1

        fetched = await test_client.get(f"/student/{body['id']}")
        assert fetched.status_code == 200
        assert fetched.json() == {
            "id": 1,
            "firstname": "Ana",
            "lastname": "Lopez",
            "gender": None,
            "age": 23,
        }

    @pytest.mark.asyncio
    async def test_create_with_multipart_fields(self, test_client):
        # The extra file part forces multipart encoding; unknown fields are ignored
        response = await test_client.post(
            "/students",
            data={"firstname": "Luis", "lastname": "Perez", "gender": "male"},
            files={"attachment": ("note.txt", b"ignored")},
        )

        assert response.status_code == 201
        fetched = await test_client.get(f"/student/{response.json()['id']}")
        assert fetched.json()["gender"] == "male"
        assert fetched.json()["age"] is None

    @pytest.mark.asyncio
    async def test_create_with_json_body(self, test_client):
        response = await test_client.post(
            "/students", json={"firstname": "Eva", "lastname": "Diaz", "age": 31}
        )

        assert response.status_code == 201
        fetched = await test_client.get(f"/student/{response.json()['id']}")
        assert fetched.json()["age"] == 31

    @pytest.mark.asyncio
    async def test_list_returns_every_student(self, test_client):
        await _create(test_client, firstname="Ana", lastname="Lopez")
        await _create(test_client, firstname="Luis", lastname="Perez", age="19")

        response = await test_client.get("/students")

        assert response.status_code == 200
        names = sorted(s["firstname"] for s in response.json())
        assert names == ["Ana", "Luis"]

    @pytest.mark.asyncio
    async def test_list_empty_store(self, test_client):
        response = await test_client.get("/students")

        assert response.status_code == 200
        assert response.json() == []


class TestCreateValidation:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "fields",
        [
            {"lastname": "Lopez"},
            {"firstname": "Ana"},
            {"firstname": "", "lastname": "Lopez"},
        ],
    )
    async def test_missing_names_rejected_without_write(self, test_client, fields):
        response = await test_client.post("/students", data=fields)

        assert response.status_code == 400
        assert response.json()["error"] == "Firstname and Lastname are required"
        assert (await test_client.get("/students")).json() == []

    @pytest.mark.asyncio
    async def test_non_numeric_age_rejected(self, test_client):
        response = await test_client.post(
            "/students", data={"firstname": "Ana", "lastname": "Lopez", "age": "abc"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Age must be a valid number"
        assert (await test_client.get("/students")).json() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"data": {"firstname": "Ana", "lastname": "Lopez", "age": "99999999999999999999"}},
            {"data": {"firstname": "Ana", "lastname": "Lopez", "age": "1_0"}},
            {"json": {"firstname": "Ana", "lastname": "Lopez", "age": 10 ** 20}},
        ],
    )
    async def test_unstorable_age_rejected(self, test_client, body):
        response = await test_client.post("/students", **body)

        assert response.status_code == 400
        assert response.json()["error"] == "Age must be a valid number"
        assert (await test_client.get("/students")).json() == []

    @pytest.mark.asyncio
    async def test_empty_body_rejected(self, test_client):
        response = await test_client.post("/students")

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_malformed_json_rejected(self, test_client):
        response = await test_client.post(
            "/students", content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Request body is not valid JSON"

    @pytest.mark.asyncio
    async def test_json_array_rejected(self, test_client):
        response = await test_client.post("/students", json=["Ana", "Lopez"])

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_file_as_name_rejected(self, test_client):
        response = await test_client.post(
            "/students",
            data={"lastname": "Lopez"},
            files={"firstname": ("name.txt", b"Ana")},
        )

        assert response.status_code == 400


class TestReplace:

    @pytest.mark.asyncio
    async def test_replace_overwrites_all_fields(self, test_client):
        student_id = await _create(
            test_client, firstname="Ana", lastname="Lopez", gender="female", age="23"
        )

        response = await test_client.put(
            f"/student/{student_id}", data={"firstname": "Anna", "lastname": "Lopez"}
        )

        assert response.status_code == 200
        expected = {
            "id": student_id,
            "firstname": "Anna",
            "lastname": "Lopez",
            "gender": None,
            "age": None,
        }
        assert response.json() == expected
        assert (await test_client.get(f"/student/{student_id}")).json() == expected

    @pytest.mark.asyncio
    async def test_replace_missing_names_rejected(self, test_client):
        student_id = await _create(test_client, firstname="Ana", lastname="Lopez")

        response = await test_client.put(f"/student/{student_id}", data={"firstname": "Anna"})

        assert response.status_code == 400
        assert response.json()["error"] == "Firstname and Lastname are required for update"
        assert (await test_client.get(f"/student/{student_id}")).json()["firstname"] == "Ana"

    @pytest.mark.asyncio
    async def test_replace_bad_age_rejected(self, test_client):
        student_id = await _create(test_client, firstname="Ana", lastname="Lopez", age="23")

        response = await test_client.put(
            f"/student/{student_id}",
            data={"firstname": "Ana", "lastname": "Lopez", "age": "old"},
        )

        assert response.status_code == 400
        assert (await test_client.get(f"/student/{student_id}")).json()["age"] == 23

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "fields",
        [
            {"firstname": "Ana", "lastname": "Lopez"},
            {"firstname": "Ana"},
            {"firstname": "Ana", "lastname": "Lopez", "age": "abc"},
        ],
    )
    async def test_replace_unknown_id_is_not_found(self, test_client, fields):
        response = await test_client.put("/student/999", data=fields)

        assert response.status_code == 404
        assert response.json()["error"] == "Student with id 999 not found"


class TestNotFoundAndDelete:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("student_id", ["999", "abc", "1_0", "99999999999999999999"])
    async def test_get_unknown_id(self, test_client, student_id):
        response = await test_client.get(f"/student/{student_id}")

        assert response.status_code == 404
        assert response.json()["error"] == f"Student with id {student_id} not found"

    @pytest.mark.asyncio
    async def test_delete_underscored_id_leaves_row_alone(self, test_client):
        for n in range(10):
            await _create(test_client, firstname=f"Ana{n}", lastname="Lopez")

        response = await test_client.delete("/student/1_0")

        assert response.status_code == 404
        assert (await test_client.get("/student/10")).status_code == 200

    @pytest.mark.asyncio
    async def test_delete_unknown_id(self, test_client):
        response = await test_client.delete("/student/999")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_then_get_is_not_found(self, test_client):
        student_id = await _create(test_client, firstname="Ana", lastname="Lopez", age="23")

        deleted = await test_client.delete(f"/student/{student_id}")
        assert deleted.status_code == 200
        assert deleted.json() == {"message": f"The Student with id: {student_id} has been deleted."}

        assert (await test_client.get(f"/student/{student_id}")).status_code == 404
        assert (await test_client.delete(f"/student/{student_id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_deleted_ids_are_not_reused(self, test_client):
        first = await _create(test_client, firstname="Ana", lastname="Lopez")
        await test_client.delete(f"/student/{first}")

        second = await _create(test_client, firstname="Luis", lastname="Perez")

        assert second > first


class TestErrorsAndAmbient:

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_shape(self, test_client):
        response = await test_client.get("/courses")

        assert response.status_code == 404
        assert "error" in response.json()

    @pytest.mark.asyncio
    async def test_wrong_method(self, test_client):
        response = await test_client.patch("/student/1")

        assert response.status_code == 405

    @pytest.mark.asyncio
    async def test_request_id_round_trip(self, test_client):
        response = await test_client.get("/student/42", headers={"X-Request-ID": "abc12345"})

        assert response.headers["X-Request-ID"] == "abc12345"
        assert response.json()["request_id"] == "abc12345"

    @pytest.mark.asyncio
    async def test_request_id_generated(self, test_client):
        response = await test_client.get("/students")

        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_health_reports_connected_store(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_store_failure_returns_500(self, app, test_client):
        failing_session = AsyncMock()
        failing_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("unable to open database file"))
        )

        async def broken_session():
            yield failing_session

        app.dependency_overrides[get_db_session] = broken_session
        try:
            response = await test_client.get("/students")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json()["error"] == "Error fetching students from database"
        assert "unable to open" not in response.text

    @pytest.mark.asyncio
    async def test_health_reports_disconnected_store(self, app, test_client):
        unreachable = MagicMock()
        unreachable.ping = AsyncMock(return_value=False)
        app.dependency_overrides[get_database] = lambda: unreachable
        try:
            response = await test_client.get("/health")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "unhealthy"
        assert body["database"] == "disconnected"
        unreachable.ping.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unexpected_error_keeps_request_id(self, app):
        def exploding_session():
            raise RuntimeError("session factory exploded")

        app.dependency_overrides[get_db_session] = exploding_session
        # ServerErrorMiddleware re-raises after sending the 500
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        try:
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                response = await client.get("/students", headers={"X-Request-ID": "err12345"})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {
            "error": "An unexpected error occurred.",
            "request_id": "err12345",
        }

    @pytest.mark.asyncio
    async def test_access_log_names_student(self, test_client, caplog):
        with caplog.at_level(logging.INFO, logger="student_registry.access"):
            await test_client.get("/student/999")
            await test_client.get("/health")

        records = [r for r in caplog.records if r.name == "student_registry.access"]
        assert len(records) == 1
        assert records[0].levelno == logging.WARNING
        assert records[0].student_id == "999"
        assert records[0].status == 404
        assert "GET /student/999 -> 404" in records[0].getMessage()
        assert "student=999" in records[0].getMessage()


class TestLifespan:

    @pytest.mark.asyncio
    async def test_store_opened_on_startup_and_closed_on_shutdown(self, test_settings, tmp_path):
        application = create_app(test_settings)

        with patch.object(Database, "close", new_callable=AsyncMock) as close:
            async with application.router.lifespan_context(application):
                assert application.state.database.url == test_settings.database_url
                assert (tmp_path / "students.sqlite").exists()
                close.assert_not_awaited()

            close.assert_awaited_once()

        # close() was replaced, so release the pool here
        await application.state.database.engine.dispose()
