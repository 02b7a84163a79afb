"""
Tests for the document endpoints.

Covers creation, access control (private vs public), pagination,
autosave updates, cascading deletes and file exports.
"""

import pytest

from tests.test_constants import (
    ALICE_UID, MISSING_ID, MALFORMED_ID, INVALID_TOKEN,
    HTTP_OK, HTTP_CREATED, HTTP_BAD_REQUEST, HTTP_UNAUTHORIZED,
    HTTP_FORBIDDEN, HTTP_NOT_FOUND,
)
from tests.conftest import auth_header


class TestCreateDocument:
    """Test POST /api/documents."""

    def test_create_document_sets_owner_and_defaults(self, client, alice_headers):
        response = client.post('/api/documents', json={
            "title": "  The Lighthouse  ",
            "content": "<p>One two three</p>",
        }, headers=alice_headers)

        assert response.status_code == HTTP_CREATED
        data = response.get_json()
        assert data["title"] == "The Lighthouse"
        assert data["userId"] == ALICE_UID
        assert data["visibility"] == "private"
        assert data["enableCharacterTracking"] is False
        assert data["wordCount"] == 3
        assert len(data["_id"]) == 24
        assert data["createdAt"]
        assert data["updatedAt"]

    def test_create_document_creates_story(self, client, alice_headers, services):
        response = client.post('/api/documents', json={"title": "Draft"}, headers=alice_headers)
        document_id = response.get_json()["_id"]

        story = services["stories"].stories.find_one({"document": document_id})
        assert story is not None
        assert story["mode"] == {"narrative": 50, "dialogue": 50}
        assert story["mood"] is None

    def test_create_document_requires_title(self, client, alice_headers):
        response = client.post('/api/documents', json={"content": "<p>x</p>"}, headers=alice_headers)

        assert response.status_code == HTTP_BAD_REQUEST
        data = response.get_json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert any(e["field"] == "title" for e in data["errors"])

    def test_create_document_rejects_wrong_types(self, client, alice_headers):
        response = client.post('/api/documents', json={"title": "T", "content": 42}, headers=alice_headers)
        assert response.status_code == HTTP_BAD_REQUEST

    def test_create_document_rejects_unknown_visibility(self, client, alice_headers):
        response = client.post('/api/documents', json={"title": "T", "visibility": "friends"},
                               headers=alice_headers)
        assert response.status_code == HTTP_BAD_REQUEST

    def test_create_document_rejects_non_object_body(self, client, alice_headers):
        response = client.post('/api/documents', json=["title"], headers=alice_headers)

        assert response.status_code == HTTP_BAD_REQUEST
        assert response.get_json()["error"] == "Request body must be a JSON object"


class TestAuthentication:
    """Every document route requires a bearer token."""

    def test_missing_token_returns_401(self, client):
        response = client.get('/api/documents')

        assert response.status_code == HTTP_UNAUTHORIZED
        assert response.get_json()["error"] == "No token provided"

    def test_non_bearer_header_returns_401(self, client):
        response = client.get('/api/documents', headers={"Authorization": "Basic abc"})
        assert response.status_code == HTTP_UNAUTHORIZED

    def test_invalid_token_returns_403(self, client):
        response = client.get('/api/documents', headers=auth_header(INVALID_TOKEN))

        assert response.status_code == HTTP_FORBIDDEN
        assert response.get_json()["error"] == "Not authorized"


class TestGetDocument:
    """Test GET /api/documents/<id>."""

    def test_owner_can_read_private_document(self, client, alice_headers, alice_document):
        response = client.get(f"/api/documents/{alice_document['_id']}", headers=alice_headers)

        assert response.status_code == HTTP_OK
        data = response.get_json()
        assert data["title"] == "The Lighthouse"
        assert data["wordCount"] == 6

    def test_other_user_cannot_read_private_document(self, client, bob_headers, alice_document):
        response = client.get(f"/api/documents/{alice_document['_id']}", headers=bob_headers)
        assert response.status_code == HTTP_FORBIDDEN

    def test_other_user_can_read_public_document(self, client, bob_headers, public_document):
        response = client.get(f"/api/documents/{public_document['_id']}", headers=bob_headers)
        assert response.status_code == HTTP_OK

    def test_missing_document_returns_404(self, client, alice_headers):
        response = client.get(f"/api/documents/{MISSING_ID}", headers=alice_headers)

        assert response.status_code == HTTP_NOT_FOUND
        assert response.get_json()["error_code"] == "NOT_FOUND"

    def test_malformed_id_returns_400(self, client, alice_headers):
        response = client.get(f"/api/documents/{MALFORMED_ID}", headers=alice_headers)

        assert response.status_code == HTTP_BAD_REQUEST
        assert response.get_json()["error"] == "Invalid ID format"


class TestListDocuments:
    """Test GET /api/documents."""

    def test_public_mode_lists_only_public_documents(self, client, bob_headers, alice_document, public_document):
        response = client.get('/api/documents?mode=public', headers=bob_headers)

        assert response.status_code == HTTP_OK
        ids = [doc["_id"] for doc in response.get_json()["documents"]]
        assert ids == [public_document["_id"]]

    def test_private_mode_lists_own_documents(self, client, alice_headers, bob_headers,
                                              alice_document, public_document):
        alice_ids = {doc["_id"] for doc in
                     client.get('/api/documents?mode=private', headers=alice_headers).get_json()["documents"]}
        bob_docs = client.get('/api/documents?mode=private', headers=bob_headers).get_json()["documents"]

        assert alice_ids == {alice_document["_id"], public_document["_id"]}
        assert bob_docs == []

    def test_default_mode_is_public(self, client, alice_headers, alice_document, public_document):
        data = client.get('/api/documents', headers=alice_headers).get_json()
        assert [doc["_id"] for doc in data["documents"]] == [public_document["_id"]]

    def test_most_recently_updated_first(self, client, alice_headers, alice_document, public_document):
        client.put(f"/api/documents/{alice_document['_id']}", json={"content": "<p>newer</p>"},
                   headers=alice_headers)

        data = client.get('/api/documents?mode=private', headers=alice_headers).get_json()
        assert data["documents"][0]["_id"] == alice_document["_id"]

    def test_pagination(self, client, alice_headers):
        for index in range(3):
            client.post('/api/documents', json={"title": f"Doc {index}"}, headers=alice_headers)

        data = client.get('/api/documents?mode=private&page=1&per_page=2', headers=alice_headers).get_json()

        assert len(data["documents"]) == 2
        assert data["pagination"] == {
            "page": 1,
            "per_page": 2,
            "total": 3,
            "total_pages": 2,
            "has_next": True,
            "has_prev": False,
        }

    def test_per_page_is_clamped(self, client, alice_headers, alice_document):
        data = client.get('/api/documents?mode=private&per_page=1000', headers=alice_headers).get_json()
        assert data["pagination"]["per_page"] == 100

    def test_invalid_mode_returns_400(self, client, alice_headers):
        response = client.get('/api/documents?mode=everyone', headers=alice_headers)
        assert response.status_code == HTTP_BAD_REQUEST


class TestUpdateDocument:
    """Test PUT /api/documents/<id> (autosave)."""

    def test_partial_update_keeps_other_fields(self, client, alice_headers, alice_document):
        response = client.put(f"/api/documents/{alice_document['_id']}",
                              json={"title": "Renamed"}, headers=alice_headers)

        assert response.status_code == HTTP_OK
        data = response.get_json()
        assert data["title"] == "Renamed"
        assert data["content"] == alice_document["content"]
        assert data["userId"] == ALICE_UID
        assert data["createdAt"] == alice_document["createdAt"]

    def test_update_content_recounts_words(self, client, alice_headers, alice_document):
        response = client.put(f"/api/documents/{alice_document['_id']}",
                              json={"content": "<h1>Title</h1><p>one two</p>"}, headers=alice_headers)
        assert response.get_json()["wordCount"] == 3

    def test_update_cannot_change_owner(self, client, alice_headers, alice_document):
        response = client.put(f"/api/documents/{alice_document['_id']}",
                              json={"userId": "mallory"}, headers=alice_headers)
        assert response.get_json()["userId"] == ALICE_UID

    def test_non_owner_cannot_update_public_document(self, client, bob_headers, public_document):
        response = client.put(f"/api/documents/{public_document['_id']}",
                              json={"title": "Mine now"}, headers=bob_headers)
        assert response.status_code == HTTP_FORBIDDEN

    def test_update_missing_document(self, client, alice_headers):
        response = client.put(f"/api/documents/{MISSING_ID}", json={"title": "x"}, headers=alice_headers)
        assert response.status_code == HTTP_NOT_FOUND


class TestDeleteDocument:
    """Test DELETE /api/documents/<id>."""

    def test_delete_cascades_to_toolbox_records(self, client, alice_headers, alice_document,
                                                make_character, services):
        document_id = alice_document["_id"]
        make_character(document_id, "Mara")
        client.get(f"/api/plots/document/{document_id}", headers=alice_headers)
        client.get(f"/api/settings/document/{document_id}", headers=alice_headers)
        client.get(f"/api/themes/document/{document_id}", headers=alice_headers)

        response = client.delete(f"/api/documents/{document_id}", headers=alice_headers)

        assert response.status_code == HTTP_OK
        assert response.get_json() == {"message": "Document deleted"}
        database = services["documents"].database
        for name in ("stories", "characters", "plots", "settings", "themes"):
            assert database[name].count({"document": document_id}) == 0
        assert client.get(f"/api/documents/{document_id}", headers=alice_headers).status_code == HTTP_NOT_FOUND

    def test_non_owner_cannot_delete(self, client, bob_headers, public_document):
        response = client.delete(f"/api/documents/{public_document['_id']}", headers=bob_headers)
        assert response.status_code == HTTP_FORBIDDEN


class TestExportDocument:
    """Test GET /api/documents/<id>/export/<format>."""

    def test_export_txt(self, client, alice_headers, alice_document):
        response = client.get(f"/api/documents/{alice_document['_id']}/export/txt", headers=alice_headers)

        assert response.status_code == HTTP_OK
        assert response.mimetype == 'text/plain'
        assert 'attachment' in response.headers['Content-Disposition']
        text = response.get_data(as_text=True)
        assert text.startswith("The Lighthouse\n")
        assert "Mara kept the voices in jars." in text

    def test_export_markdown_keeps_emphasis(self, client, alice_headers, alice_document):
        response = client.get(f"/api/documents/{alice_document['_id']}/export/markdown", headers=alice_headers)

        assert response.status_code == HTTP_OK
        text = response.get_data(as_text=True)
        assert text.startswith("# The Lighthouse")
        assert "**voices**" in text

    @pytest.mark.parametrize("format_type,magic", [
        ("pdf", b"%PDF"),
        ("docx", b"PK"),
        ("epub", b"PK"),
    ])
    def test_export_binary_formats(self, client, alice_headers, alice_document, format_type, magic):
        response = client.get(f"/api/documents/{alice_document['_id']}/export/{format_type}",
                              headers=alice_headers)

        assert response.status_code == HTTP_OK
        assert response.get_data().startswith(magic)

    def test_export_invalid_format(self, client, alice_headers, alice_document):
        response = client.get(f"/api/documents/{alice_document['_id']}/export/rtf", headers=alice_headers)

        assert response.status_code == HTTP_BAD_REQUEST
        assert "rtf" in response.get_json()["error"]

    def test_export_empty_document(self, client, alice_headers):
        document = client.post('/api/documents', json={"title": "Blank"}, headers=alice_headers).get_json()

        response = client.get(f"/api/documents/{document['_id']}/export/txt", headers=alice_headers)
        assert response.status_code == HTTP_BAD_REQUEST

    def test_export_private_document_by_other_user(self, client, bob_headers, alice_document):
        response = client.get(f"/api/documents/{alice_document['_id']}/export/txt", headers=bob_headers)
        assert response.status_code == HTTP_FORBIDDEN
