"""Unit tests for the HTTP gateway."""

import base64
import io

import pytest
from fastapi.testclient import TestClient

from smartdoc.core.config import Settings
from smartdoc.interfaces.errors import FieldStoreUnavailable
from smartdoc.interfaces.field_store import BaseFieldStore
from smartdoc.interfaces.template import DOCX_MEDIA_TYPE
from smartdoc.main import create_app

from docx_helpers import corrupt_entry_data, read_body

API_KEY = "secret-key"
AUTH = {"X-API-Key": API_KEY}


class UnavailableFieldStore(BaseFieldStore):
    """Field store whose backend is always down."""

    async def put(self, record):
        raise FieldStoreUnavailable("down")

    async def get(self, template_id):
        raise FieldStoreUnavailable("down")

    async def delete(self, template_id):
        raise FieldStoreUnavailable("down")

    async def list(self):
        raise FieldStoreUnavailable("down")


@pytest.fixture
def settings(tmp_path):
    return Settings(
        api_key=API_KEY,
        field_store_type="local",
        storage_dir=tmp_path / "storage",
        log_dir=tmp_path / "logs",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def upload(client, content, filename="invoice.docx"):
    return client.post(
        "/templates",
        files={"file": (filename, content, DOCX_MEDIA_TYPE)},
        headers=AUTH,
    )


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["field_store"] == "local"


class TestTemplateRoutes:
    """Test suite for /templates."""

    # =========================================================================
    # Upload Tests
    # =========================================================================

    def test_upload(self, client, invoice_docx):
        response = upload(client, invoice_docx)

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "invoice.docx"
        assert data["fields"] == ["name", "invoice_id", "due_date"]
        assert data["fieldCount"] == 3
        assert "uploadedAt" in data
        assert len(data["id"]) == 12

    def test_upload_requires_api_key(self, client, invoice_docx):
        response = client.post(
            "/templates",
            files={"file": ("invoice.docx", invoice_docx, DOCX_MEDIA_TYPE)},
        )
        assert response.status_code == 401
        assert response.json() == {
            "detail": "Unauthorized: Invalid API Key",
            "error_code": "UNAUTHORIZED",
        }

    def test_upload_wrong_api_key(self, client):
        response = client.get("/templates", headers={"X-API-Key": "wrong"})
        assert response.status_code == 401

    def test_upload_without_placeholders_rejected(self, client, plain_docx):
        response = upload(client, plain_docx)

        assert response.status_code == 422
        assert response.json()["error_code"] == "NO_PLACEHOLDERS"
        assert client.get("/templates", headers=AUTH).json()["total"] == 0

    def test_upload_malformed_rejected(self, client):
        response = upload(client, b"definitely not a zip")

        assert response.status_code == 400
        assert response.json()["error_code"] == "MALFORMED_PACKAGE"

    def test_upload_corrupt_compressed_entry_rejected(self, client, invoice_docx):
        response = upload(client, corrupt_entry_data(invoice_docx))

        assert response.status_code == 400
        assert response.json()["error_code"] == "MALFORMED_PACKAGE"

    def test_upload_wrong_extension(self, client, invoice_docx):
        response = upload(client, invoice_docx, filename="invoice.pdf")
        assert response.status_code == 415
        assert response.json()["error_code"] == "UNSUPPORTED_MEDIA_TYPE"

    def test_upload_too_large(self, tmp_path, invoice_docx):
        settings = Settings(
            api_key=API_KEY,
            storage_dir=tmp_path / "small",
            log_dir=tmp_path / "logs",
            max_upload_bytes=10,
        )
        with TestClient(create_app(settings)) as client:
            response = upload(client, invoice_docx)
        assert response.status_code == 413
        assert response.json()["error_code"] == "PAYLOAD_TOO_LARGE"

    # =========================================================================
    # Read / Delete Tests
    # =========================================================================

    def test_list_and_get(self, client, invoice_docx):
        template_id = upload(client, invoice_docx).json()["id"]

        listing = client.get("/templates", headers=AUTH).json()
        assert listing["total"] == 1
        assert listing["templates"][0]["id"] == template_id
        assert listing["templates"][0]["fieldCount"] == 3

        detail = client.get(f"/templates/{template_id}", headers=AUTH).json()
        assert detail["fields"] == ["name", "invoice_id", "due_date"]

    def test_get_missing(self, client):
        response = client.get("/templates/abc123", headers=AUTH)

        assert response.status_code == 404
        assert response.json()["error_code"] == "TEMPLATE_NOT_FOUND"

    def test_download_original(self, client, invoice_docx):
        template_id = upload(client, invoice_docx).json()["id"]

        response = client.get(f"/templates/{template_id}/download", headers=AUTH)

        assert response.status_code == 200
        assert response.content == invoice_docx
        assert 'filename="invoice.docx"' in response.headers["content-disposition"]

    def test_delete(self, client, invoice_docx):
        template_id = upload(client, invoice_docx).json()["id"]

        response = client.delete(f"/templates/{template_id}", headers=AUTH)
        assert response.status_code == 204

        assert client.get(f"/templates/{template_id}", headers=AUTH).status_code == 404
        assert client.delete(f"/templates/{template_id}", headers=AUTH).status_code == 404

    # =========================================================================
    # Fill / Preview Tests
    # =========================================================================

    def test_fill_stored(self, client, invoice_docx):
        template_id = upload(client, invoice_docx).json()["id"]

        response = client.post(
            f"/templates/{template_id}/fill",
            json={"fields": {"name": "A & B", "invoice_id": "999", "extra": "ignored"}},
            headers=AUTH,
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == DOCX_MEDIA_TYPE
        assert 'filename="filled_invoice.docx"' in response.headers["content-disposition"]
        body = read_body(response.content)
        assert "Hello A &amp; B, invoice 999." in body
        assert "{due_date}" not in body
        assert "ignored" not in body

    def test_preview(self, client, invoice_docx):
        template_id = upload(client, invoice_docx).json()["id"]

        response = client.post(
            f"/templates/{template_id}/preview",
            json={"fields": {"name": "Jane Doe", "invoice_id": 999}},
            headers=AUTH,
        )

        assert response.status_code == 200
        assert response.json()["paragraphs"] == [
            "Hello Jane Doe, invoice 999.",
            "Due: ",
            "Thank you, Jane Doe!",
        ]


class TestFillEndpoint:
    """Test suite for POST /api/fill."""

    def test_fill_inline_template(self, client, invoice_docx):
        response = client.post(
            "/api/fill",
            json={
                "api_key": API_KEY,
                "template": base64.b64encode(invoice_docx).decode("ascii"),
                "data": {"name": "Jane Doe", "invoice_id": "999"},
            },
        )

        assert response.status_code == 200
        assert 'filename="generated.docx"' in response.headers["content-disposition"]
        assert "Hello Jane Doe, invoice 999." in read_body(response.content)

    def test_fill_output_opens_in_python_docx(self, client, invoice_docx):
        from docx import Document

        response = client.post(
            "/api/fill",
            json={
                "api_key": API_KEY,
                "template": base64.b64encode(invoice_docx).decode("ascii"),
                "fields": {"name": "Jane"},
            },
        )

        doc = Document(io.BytesIO(response.content))
        assert doc.paragraphs[2].text == "Thank you, Jane!"

    def test_fill_by_doc_id(self, client, invoice_docx):
        template_id = upload(client, invoice_docx).json()["id"]

        response = client.post(
            "/api/fill",
            json={"api_key": API_KEY, "docID": template_id, "fields": {"name": "Jo"}},
        )

        assert response.status_code == 200
        assert "Hello Jo, invoice ." in read_body(response.content)

    def test_fill_invalid_api_key(self, client, invoice_docx):
        response = client.post(
            "/api/fill",
            json={
                "api_key": "wrong",
                "template": base64.b64encode(invoice_docx).decode("ascii"),
                "fields": {},
            },
        )
        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    def test_fill_requires_template_source(self, client):
        response = client.post("/api/fill", json={"api_key": API_KEY, "fields": {}})
        assert response.status_code == 422

    def test_fill_rejects_both_sources(self, client, invoice_docx):
        response = client.post(
            "/api/fill",
            json={
                "api_key": API_KEY,
                "template": base64.b64encode(invoice_docx).decode("ascii"),
                "docID": "abc123",
                "fields": {},
            },
        )
        assert response.status_code == 422

    def test_fill_invalid_base64(self, client):
        response = client.post(
            "/api/fill",
            json={"api_key": API_KEY, "template": "!!not base64!!", "fields": {}},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_REQUEST"

    def test_fill_malformed_template(self, client):
        response = client.post(
            "/api/fill",
            json={
                "api_key": API_KEY,
                "template": base64.b64encode(b"plain text").decode("ascii"),
                "fields": {},
            },
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "MALFORMED_PACKAGE"

    def test_fill_corrupt_compressed_entry(self, client, invoice_docx):
        response = client.post(
            "/api/fill",
            json={
                "api_key": API_KEY,
                "template": base64.b64encode(corrupt_entry_data(invoice_docx)).decode("ascii"),
                "fields": {"name": "x"},
            },
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "MALFORMED_PACKAGE"

    def test_fill_inline_template_too_large(self, tmp_path, invoice_docx):
        settings = Settings(
            api_key=API_KEY,
            storage_dir=tmp_path / "small",
            log_dir=tmp_path / "logs",
            max_upload_bytes=10,
        )
        with TestClient(create_app(settings)) as client:
            response = client.post(
                "/api/fill",
                json={
                    "api_key": API_KEY,
                    "template": base64.b64encode(invoice_docx).decode("ascii"),
                    "fields": {},
                },
            )
        assert response.status_code == 413
        assert response.json()["error_code"] == "PAYLOAD_TOO_LARGE"

    def test_fill_unknown_doc_id(self, client):
        response = client.post(
            "/api/fill",
            json={"api_key": API_KEY, "docID": 12345, "fields": {"name": "x"}},
        )
        assert response.status_code == 404

    def test_store_outage_only_affects_stored_fills(self, app, client, invoice_docx, monkeypatch):
        monkeypatch.setattr(
            app.state.factory, "get_field_store", lambda *args: UnavailableFieldStore()
        )

        by_id = client.post(
            "/api/fill",
            json={"api_key": API_KEY, "docID": "abc123", "fields": {}},
        )
        assert by_id.status_code == 503
        assert by_id.json()["error_code"] == "FIELD_STORE_UNAVAILABLE"
        assert "template bytes directly" in by_id.json()["detail"]

        inline = client.post(
            "/api/fill",
            json={
                "api_key": API_KEY,
                "template": base64.b64encode(invoice_docx).decode("ascii"),
                "fields": {"name": "Jane"},
            },
        )
        assert inline.status_code == 200
