"""
Tests for the themes toolbox endpoints: main themes, motifs and symbols.
"""

import pytest

from src.inkwell.utils.repository import is_valid_id
from tests.test_constants import MISSING_ID, HTTP_OK, HTTP_CREATED, HTTP_BAD_REQUEST, HTTP_NOT_FOUND


def themes_url(document_id, suffix=""):
    return f"/api/themes/document/{document_id}{suffix}"


@pytest.fixture
def themes(client, alice_headers, alice_document):
    return client.get(themes_url(alice_document["_id"]), headers=alice_headers).get_json()


class TestThemeRecord:

    def test_get_creates_empty_lists(self, themes, alice_document):
        assert themes["document"] == alice_document["_id"]
        assert themes["mainThemes"] == []
        assert themes["motifs"] == []
        assert themes["symbols"] == []

    def test_update_replaces_only_sent_lists(self, client, alice_headers, alice_document, themes):
        url = themes_url(alice_document["_id"])
        client.put(url, json={"motifs": [{"name": "Tides"}]}, headers=alice_headers)

        response = client.put(url, json={"mainThemes": [{"name": "Memory"}]}, headers=alice_headers)

        data = response.get_json()
        assert [t["name"] for t in data["mainThemes"]] == ["Memory"]
        assert [m["name"] for m in data["motifs"]] == ["Tides"]

    def test_replacing_list_keeps_existing_item_ids(self, client, alice_headers, alice_document, themes):
        url = themes_url(alice_document["_id"])
        motif = client.put(url, json={"motifs": [{"name": "Tides"}]}, headers=alice_headers).get_json()["motifs"][0]

        response = client.put(url, json={"motifs": [{"_id": motif["_id"], "name": "Tides", "purpose": "Time"}]},
                              headers=alice_headers)

        updated = response.get_json()["motifs"][0]
        assert updated["_id"] == motif["_id"]
        assert updated["purpose"] == "Time"


class TestThemeItems:

    @pytest.mark.parametrize("key,field,payload", [
        ("main-themes", "mainThemes", {"name": "Memory", "exploration": "Through the jars"}),
        ("motifs", "motifs", {"name": "Tides", "purpose": "Passing time"}),
        ("symbols", "symbols", {"name": "Lamp", "meaning": "Hope"}),
    ])
    def test_add_item(self, client, alice_headers, alice_document, themes, key, field, payload):
        response = client.post(themes_url(alice_document["_id"], f"/{key}"), json=payload, headers=alice_headers)

        assert response.status_code == HTTP_CREATED
        items = response.get_json()[field]
        assert len(items) == 1
        assert items[0]["name"] == payload["name"]
        assert len(items[0]["_id"]) == 24

    def test_symbol_occurrences_get_ids(self, client, alice_headers, alice_document, themes):
        response = client.post(themes_url(alice_document["_id"], "/symbols"), json={
            "name": "Lamp",
            "occurrences": [{"context": "Chapter one", "significance": "First lit"}],
        }, headers=alice_headers)

        occurrence = response.get_json()["symbols"][0]["occurrences"][0]
        assert occurrence["context"] == "Chapter one"
        assert len(occurrence["_id"]) == 24

    def test_replaced_symbols_keep_occurrence_fields(self, client, alice_headers, alice_document, themes):
        response = client.put(themes_url(alice_document["_id"]), json={
            "symbols": [{"name": "Lamp", "occurrences": [{"context": "Chapter one"}]}],
        }, headers=alice_headers)

        symbol = response.get_json()["symbols"][0]
        assert symbol["meaning"] == ""
        occurrence = symbol["occurrences"][0]
        assert is_valid_id(occurrence["_id"])
        assert occurrence["context"] == "Chapter one"
        assert occurrence["significance"] == ""

    def test_updated_symbol_occurrences_get_ids(self, client, alice_headers, alice_document, themes):
        symbols = client.post(themes_url(alice_document["_id"], "/symbols"), json={"name": "Lamp"},
                              headers=alice_headers).get_json()["symbols"]

        response = client.put(themes_url(alice_document["_id"], f"/symbols/{symbols[0]['_id']}"),
                              json={"occurrences": [{"context": "Chapter two"}]}, headers=alice_headers)

        occurrence = response.get_json()["symbols"][0]["occurrences"][0]
        assert is_valid_id(occurrence["_id"])
        assert occurrence["significance"] == ""

    def test_replaced_themes_get_defaults(self, client, alice_headers, alice_document, themes):
        response = client.put(themes_url(alice_document["_id"]), json={
            "mainThemes": [{"name": "Isolation"}],
            "motifs": [{"name": "Fog"}],
        }, headers=alice_headers)

        data = response.get_json()
        assert data["mainThemes"][0]["exploration"] == ""
        assert data["motifs"][0]["purpose"] == ""

    def test_symbol_occurrence_requires_context(self, client, alice_headers, alice_document, themes):
        response = client.post(themes_url(alice_document["_id"], "/symbols"),
                               json={"name": "Lamp", "occurrences": [{"significance": "?"}]},
                               headers=alice_headers)
        assert response.status_code == HTTP_BAD_REQUEST

    def test_update_motif(self, client, alice_headers, alice_document, themes):
        url = themes_url(alice_document["_id"], "/motifs")
        motif = client.post(url, json={"name": "Tides"}, headers=alice_headers).get_json()["motifs"][0]

        response = client.put(f"{url}/{motif['_id']}", json={"purpose": "Passing time"}, headers=alice_headers)

        assert response.status_code == HTTP_OK
        assert response.get_json()["motifs"][0]["purpose"] == "Passing time"
        assert response.get_json()["motifs"][0]["name"] == "Tides"

    def test_remove_theme(self, client, alice_headers, alice_document, themes):
        url = themes_url(alice_document["_id"], "/main-themes")
        theme = client.post(url, json={"name": "Memory"}, headers=alice_headers).get_json()["mainThemes"][0]

        response = client.delete(f"{url}/{theme['_id']}", headers=alice_headers)

        assert response.status_code == HTTP_OK
        assert response.get_json()["mainThemes"] == []

    @pytest.mark.parametrize("key,label", [
        ("main-themes", "Theme"),
        ("motifs", "Motif"),
        ("symbols", "Symbol"),
    ])
    def test_missing_item_label(self, client, alice_headers, alice_document, themes, key, label):
        response = client.delete(themes_url(alice_document["_id"], f"/{key}/{MISSING_ID}"), headers=alice_headers)

        assert response.status_code == HTTP_NOT_FOUND
        assert response.get_json()["details"]["resource_type"] == label

    def test_add_before_record_exists(self, client, alice_headers, alice_document):
        response = client.post(themes_url(alice_document["_id"], "/motifs"), json={"name": "Tides"},
                               headers=alice_headers)
        assert response.status_code == HTTP_NOT_FOUND

    def test_unknown_list_is_404(self, client, alice_headers, alice_document, themes):
        response = client.post(themes_url(alice_document["_id"], "/archetypes"), json={"name": "Hero"},
                               headers=alice_headers)
        assert response.status_code == HTTP_NOT_FOUND
