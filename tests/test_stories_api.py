"""
Tests for story mode and mood endpoints.
"""

import pytest

from tests.test_constants import (
    MISSING_ID, HTTP_OK, HTTP_BAD_REQUEST, HTTP_FORBIDDEN, HTTP_NOT_FOUND,
)


def story_url(document_id, suffix=""):
    return f"/api/stories/document/{document_id}{suffix}"


class TestGetStory:

    def test_new_document_has_default_story(self, client, alice_headers, alice_document):
        response = client.get(story_url(alice_document["_id"]), headers=alice_headers)

        assert response.status_code == HTTP_OK
        data = response.get_json()
        assert data["document"] == alice_document["_id"]
        assert data["mode"] == {"narrative": 50, "dialogue": 50}
        assert data["mood"] is None

    def test_missing_story_is_recreated(self, client, alice_headers, alice_document, services):
        stories = services["stories"].stories
        stories.delete_many({"document": alice_document["_id"]})

        response = client.get(story_url(alice_document["_id"]), headers=alice_headers)

        assert response.status_code == HTTP_OK
        assert stories.count({"document": alice_document["_id"]}) == 1

    def test_private_story_hidden_from_others(self, client, bob_headers, alice_document):
        assert client.get(story_url(alice_document["_id"]), headers=bob_headers).status_code == HTTP_FORBIDDEN

    def test_missing_document(self, client, alice_headers):
        assert client.get(story_url(MISSING_ID), headers=alice_headers).status_code == HTTP_NOT_FOUND


class TestStoryMode:

    def test_update_mode(self, client, alice_headers, alice_document):
        response = client.put(story_url(alice_document["_id"], "/mode"),
                              json={"narrative": 70, "dialogue": 30}, headers=alice_headers)

        assert response.status_code == HTTP_OK
        assert response.get_json()["mode"] == {"narrative": 70, "dialogue": 30}

    @pytest.mark.parametrize("body", [
        {"narrative": 101, "dialogue": 0},
        {"narrative": -1, "dialogue": 50},
        {"narrative": "lots", "dialogue": 50},
    ])
    def test_mode_out_of_range(self, client, alice_headers, alice_document, body):
        response = client.put(story_url(alice_document["_id"], "/mode"), json=body, headers=alice_headers)

        assert response.status_code == HTTP_BAD_REQUEST
        assert response.get_json()["error_code"] == "VALIDATION_ERROR"

    def test_mode_owner_only(self, client, bob_headers, public_document):
        response = client.put(story_url(public_document["_id"], "/mode"),
                              json={"narrative": 10, "dialogue": 90}, headers=bob_headers)
        assert response.status_code == HTTP_FORBIDDEN


class TestStoryMood:

    def test_preset_mood_by_name(self, client, alice_headers, alice_document):
        response = client.put(story_url(alice_document["_id"], "/mood"),
                              json={"mood": "Tense"}, headers=alice_headers)

        assert response.status_code == HTTP_OK
        assert response.get_json()["mood"] == {
            "type": "preset",
            "preset": "tense",
            "description": "Suspenseful and anxious",
        }

    def test_preset_mood_object(self, client, alice_headers, alice_document):
        response = client.put(story_url(alice_document["_id"], "/mood"),
                              json={"mood": {"type": "preset", "preset": "romantic"}}, headers=alice_headers)
        assert response.get_json()["mood"]["preset"] == "romantic"

    def test_custom_mood(self, client, alice_headers, alice_document):
        response = client.put(story_url(alice_document["_id"], "/mood"), json={
            "mood": {"type": "custom", "custom": " bitter-sweet ", "description": "Loss with warmth"},
        }, headers=alice_headers)

        assert response.status_code == HTTP_OK
        assert response.get_json()["mood"] == {
            "type": "custom",
            "custom": "bitter-sweet",
            "description": "Loss with warmth",
        }

    def test_invalid_preset_lists_valid_moods(self, client, alice_headers, alice_document):
        response = client.put(story_url(alice_document["_id"], "/mood"),
                              json={"mood": "gloomy"}, headers=alice_headers)

        assert response.status_code == HTTP_BAD_REQUEST
        data = response.get_json()
        assert "gloomy" in data["error"]
        assert "peaceful" in data["details"]["valid_moods"]

    @pytest.mark.parametrize("custom", ["x", "a" * 51, "moody!"])
    def test_invalid_custom_mood(self, client, alice_headers, alice_document, custom):
        response = client.put(story_url(alice_document["_id"], "/mood"),
                              json={"mood": {"type": "custom", "custom": custom}}, headers=alice_headers)
        assert response.status_code == HTTP_BAD_REQUEST

    def test_unknown_mood_type(self, client, alice_headers, alice_document):
        response = client.put(story_url(alice_document["_id"], "/mood"),
                              json={"mood": {"type": "random"}}, headers=alice_headers)
        assert response.status_code == HTTP_BAD_REQUEST

    def test_null_clears_mood(self, client, alice_headers, alice_document):
        url = story_url(alice_document["_id"], "/mood")
        client.put(url, json={"mood": "happy"}, headers=alice_headers)

        response = client.put(url, json={"mood": None}, headers=alice_headers)

        assert response.status_code == HTTP_OK
        assert response.get_json()["mood"] is None

    def test_mood_key_required(self, client, alice_headers, alice_document):
        response = client.put(story_url(alice_document["_id"], "/mood"), json={}, headers=alice_headers)

        assert response.status_code == HTTP_BAD_REQUEST
        assert response.get_json()["error"] == "Mood is required"

    def test_mood_owner_only(self, client, bob_headers, public_document):
        response = client.put(story_url(public_document["_id"], "/mood"),
                              json={"mood": "happy"}, headers=bob_headers)
        assert response.status_code == HTTP_FORBIDDEN
