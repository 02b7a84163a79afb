"""
Tests for the plot toolbox endpoints.

Covers get-or-create, partial updates, ordered plot points (add, update,
remove, reorder) and validation of character references.
"""

import pytest

from tests.test_constants import (
    MISSING_ID, MALFORMED_ID,
    HTTP_OK, HTTP_CREATED, HTTP_BAD_REQUEST, HTTP_FORBIDDEN, HTTP_NOT_FOUND,
)


def plot_url(document_id, suffix=""):
    return f"/api/plots/document/{document_id}{suffix}"


@pytest.fixture
def plot(client, alice_headers, alice_document):
    """A created plot record for Alice's document."""
    return client.get(plot_url(alice_document["_id"]), headers=alice_headers).get_json()


@pytest.fixture
def add_point(client, alice_headers, alice_document, plot):
    def _add(title, **fields):
        payload = {"title": title}
        payload.update(fields)
        response = client.post(plot_url(alice_document["_id"], "/points"), json=payload, headers=alice_headers)
        assert response.status_code == HTTP_CREATED, response.get_json()
        return response.get_json()
    return _add


class TestPlotRecord:

    def test_get_creates_defaults(self, client, alice_headers, alice_document):
        response = client.get(plot_url(alice_document["_id"]), headers=alice_headers)

        assert response.status_code == HTTP_OK
        data = response.get_json()
        assert data["document"] == alice_document["_id"]
        assert data["structure"] == "three_act"
        assert data["plotPoints"] == []
        assert data["mainConflict"] == ""
        assert data["mainConflictCharacters"] == []
        assert data["synopsis"] == ""

    def test_get_is_idempotent(self, client, alice_headers, alice_document):
        first = client.get(plot_url(alice_document["_id"]), headers=alice_headers).get_json()
        second = client.get(plot_url(alice_document["_id"]), headers=alice_headers).get_json()
        assert first["_id"] == second["_id"]

    def test_partial_update(self, client, alice_headers, alice_document, plot):
        response = client.put(plot_url(alice_document["_id"]),
                              json={"synopsis": "A keeper loses her voice."}, headers=alice_headers)

        assert response.status_code == HTTP_OK
        data = response.get_json()
        assert data["synopsis"] == "A keeper loses her voice."
        assert data["structure"] == "three_act"
        assert data["_id"] == plot["_id"]

    def test_update_upserts(self, client, alice_headers, alice_document):
        response = client.put(plot_url(alice_document["_id"]),
                              json={"structure": "hero_journey"}, headers=alice_headers)

        assert response.status_code == HTTP_OK
        assert response.get_json()["structure"] == "hero_journey"

    def test_invalid_structure(self, client, alice_headers, alice_document):
        response = client.put(plot_url(alice_document["_id"]), json={"structure": "seven_act"},
                              headers=alice_headers)
        assert response.status_code == HTTP_BAD_REQUEST

    def test_replacing_points_renumbers_order(self, client, alice_headers, alice_document):
        response = client.put(plot_url(alice_document["_id"]), json={
            "plotPoints": [{"title": "Arrival", "order": 7}, {"title": "Storm", "order": 2}],
        }, headers=alice_headers)

        points = response.get_json()["plotPoints"]
        assert [(p["title"], p["order"]) for p in points] == [("Arrival", 0), ("Storm", 1)]
        assert all(len(p["_id"]) == 24 for p in points)

    def test_conflict_characters_must_be_in_document(self, client, alice_headers, alice_document,
                                                     public_document, make_character):
        stranger = make_character(public_document["_id"], "Stranger")

        response = client.put(plot_url(alice_document["_id"]),
                              json={"mainConflictCharacters": [stranger["_id"]]}, headers=alice_headers)

        assert response.status_code == HTTP_BAD_REQUEST
        assert response.get_json()["details"]["characters"] == [stranger["_id"]]

    def test_replaced_points_get_defaults(self, client, alice_headers, alice_document):
        response = client.put(plot_url(alice_document["_id"]),
                              json={"plotPoints": [{"title": "Storm"}]}, headers=alice_headers)

        assert response.status_code == HTTP_OK
        point = response.get_json()["plotPoints"][0]
        assert point["type"] == "setup"
        assert point["description"] == ""
        assert point["involvedCharacters"] == []
        assert point["order"] == 0

    def test_rejected_update_does_not_create_record(self, client, alice_headers, alice_document, services):
        response = client.put(plot_url(alice_document["_id"]),
                              json={"mainConflictCharacters": [MISSING_ID]}, headers=alice_headers)

        assert response.status_code == HTTP_BAD_REQUEST
        assert services["plots"].records.find_one({"document": alice_document["_id"]}) is None

    def test_conflict_characters_malformed_id(self, client, alice_headers, alice_document):
        response = client.put(plot_url(alice_document["_id"]),
                              json={"mainConflictCharacters": [MALFORMED_ID]}, headers=alice_headers)
        assert response.status_code == HTTP_BAD_REQUEST

    def test_conflict_characters_from_document(self, client, alice_headers, alice_document, make_character):
        mara = make_character(alice_document["_id"], "Mara")

        response = client.put(plot_url(alice_document["_id"]),
                              json={"mainConflictCharacters": [mara["_id"]]}, headers=alice_headers)

        assert response.status_code == HTTP_OK
        assert response.get_json()["mainConflictCharacters"] == [mara["_id"]]


class TestPlotAccess:

    def test_public_plot_readable_by_others(self, client, bob_headers, public_document):
        assert client.get(plot_url(public_document["_id"]), headers=bob_headers).status_code == HTTP_OK

    def test_private_plot_hidden_from_others(self, client, bob_headers, alice_document):
        assert client.get(plot_url(alice_document["_id"]), headers=bob_headers).status_code == HTTP_FORBIDDEN

    def test_update_owner_only(self, client, bob_headers, public_document):
        response = client.put(plot_url(public_document["_id"]), json={"synopsis": "x"}, headers=bob_headers)
        assert response.status_code == HTTP_FORBIDDEN

    def test_missing_document(self, client, alice_headers):
        assert client.get(plot_url(MISSING_ID), headers=alice_headers).status_code == HTTP_NOT_FOUND


class TestPlotPoints:

    def test_add_point_appends(self, add_point):
        add_point("Arrival")
        data = add_point("Storm", type="conflict", description="The lamp fails")

        points = data["plotPoints"]
        assert [p["title"] for p in points] == ["Arrival", "Storm"]
        assert [p["order"] for p in points] == [0, 1]
        assert points[1]["type"] == "conflict"
        assert points[1]["createdAt"]

    def test_add_point_at_position(self, add_point):
        add_point("Arrival")
        add_point("Storm")
        data = add_point("Prologue", order=0)
        assert [p["title"] for p in data["plotPoints"]] == ["Prologue", "Arrival", "Storm"]

    def test_add_point_requires_existing_record(self, client, alice_headers, alice_document):
        response = client.post(plot_url(alice_document["_id"], "/points"),
                               json={"title": "Arrival"}, headers=alice_headers)

        assert response.status_code == HTTP_NOT_FOUND
        assert response.get_json()["details"]["resource_type"] == "Plot"

    def test_add_point_requires_title(self, client, alice_headers, alice_document, plot):
        response = client.post(plot_url(alice_document["_id"], "/points"),
                               json={"description": "untitled"}, headers=alice_headers)
        assert response.status_code == HTTP_BAD_REQUEST

    def test_add_point_with_unknown_character(self, client, alice_headers, alice_document, plot):
        response = client.post(plot_url(alice_document["_id"], "/points"),
                               json={"title": "Storm", "involvedCharacters": [MISSING_ID]},
                               headers=alice_headers)
        assert response.status_code == HTTP_BAD_REQUEST

    def test_update_point(self, client, alice_headers, alice_document, add_point):
        point = add_point("Arrival")["plotPoints"][0]

        response = client.put(plot_url(alice_document["_id"], f"/points/{point['_id']}"),
                              json={"description": "By boat"}, headers=alice_headers)

        assert response.status_code == HTTP_OK
        updated = response.get_json()["plotPoints"][0]
        assert updated["title"] == "Arrival"
        assert updated["description"] == "By boat"
        assert updated["createdAt"] == point["createdAt"]

    def test_update_point_order_moves_it(self, client, alice_headers, alice_document, add_point):
        add_point("Arrival")
        add_point("Storm")
        last = add_point("Rescue")["plotPoints"][2]

        response = client.put(plot_url(alice_document["_id"], f"/points/{last['_id']}"),
                              json={"order": 0}, headers=alice_headers)

        assert [p["title"] for p in response.get_json()["plotPoints"]] == ["Rescue", "Arrival", "Storm"]

    def test_update_missing_point(self, client, alice_headers, alice_document, plot):
        response = client.put(plot_url(alice_document["_id"], f"/points/{MISSING_ID}"),
                              json={"title": "x"}, headers=alice_headers)

        assert response.status_code == HTTP_NOT_FOUND
        assert response.get_json()["details"]["resource_type"] == "Plot point"

    def test_remove_point_renumbers(self, client, alice_headers, alice_document, add_point):
        first = add_point("Arrival")["plotPoints"][0]
        add_point("Storm")

        response = client.delete(plot_url(alice_document["_id"], f"/points/{first['_id']}"),
                                 headers=alice_headers)

        assert response.status_code == HTTP_OK
        points = response.get_json()["plotPoints"]
        assert [(p["title"], p["order"]) for p in points] == [("Storm", 0)]

    def test_remove_point_owner_only(self, client, alice_headers, bob_headers, public_document):
        client.get(plot_url(public_document["_id"]), headers=alice_headers)
        point = client.post(plot_url(public_document["_id"], "/points"),
                            json={"title": "Arrival"}, headers=alice_headers).get_json()["plotPoints"][0]

        response = client.delete(plot_url(public_document["_id"], f"/points/{point['_id']}"),
                                 headers=bob_headers)
        assert response.status_code == HTTP_FORBIDDEN


class TestReorderPlotPoints:

    def test_reorder(self, client, alice_headers, alice_document, add_point):
        add_point("Arrival")
        add_point("Storm")
        points = add_point("Rescue")["plotPoints"]
        new_order = [points[2]["_id"], points[0]["_id"], points[1]["_id"]]

        response = client.put(plot_url(alice_document["_id"], "/points/order"),
                              json={"order": new_order}, headers=alice_headers)

        assert response.status_code == HTTP_OK
        reordered = response.get_json()["plotPoints"]
        assert [p["_id"] for p in reordered] == new_order
        assert [p["order"] for p in reordered] == [0, 1, 2]

    @pytest.mark.parametrize("pick", [
        lambda ids: ids[:1],
        lambda ids: ids + [ids[0]],
        lambda ids: [ids[0], MISSING_ID],
    ])
    def test_reorder_must_be_permutation(self, client, alice_headers, alice_document, add_point, pick):
        add_point("Arrival")
        ids = [p["_id"] for p in add_point("Storm")["plotPoints"]]

        response = client.put(plot_url(alice_document["_id"], "/points/order"),
                              json={"order": pick(ids)}, headers=alice_headers)

        assert response.status_code == HTTP_BAD_REQUEST
        assert response.get_json()["error"] == "Order must list every plot point exactly once"
