"""
Tests for AI activity suggestions with a mocked LLM.
"""
import json
import random
from typing import Optional

import pytest

from travel_planner.application.suggestions import (
    MOODS,
    ActivitySuggester,
    build_prompt,
    get_activity_suggester,
    parse_suggestions,
)
from travel_planner.config import Settings
from travel_planner.domain.errors import ExternalServiceError, ServiceUnavailableError
from travel_planner.domain.models import ActivityCategory
from travel_planner.infrastructure.llm_client import (
    AnthropicLLMClient,
    IoNetLLMClient,
    LLMClient,
    extract_json_text,
    get_suggestion_llm_client,
)
from travel_planner.main import app

from conftest import create_trip


SUGGESTIONS = [
    {"title": "Trastevere food tour", "description": "Street food.", "duration_minutes": 180,
     "cost_estimate": "60 EUR", "category": "food"},
    {"title": "Appian Way by bike", "description": "Cycle the old road.", "duration_minutes": 240,
     "cost_estimate": "25 EUR", "category": "leisure"},
    {"title": "Colosseum", "description": "Already planned.", "duration_minutes": 120,
     "cost_estimate": "18 EUR", "category": "culture"},
]


class MockLLMClient(LLMClient):
    """Returns a canned response and records the prompts it got."""

    def __init__(self, response: str):
        self.response = response
        self.prompts = []

    async def generate_text(self, prompt: str, system_prompt: Optional[str] = None, max_tokens: int = 1024) -> str:
        self.prompts.append(prompt)
        return self.response


class FailingLLMClient(LLMClient):
    async def generate_text(self, prompt: str, system_prompt: Optional[str] = None, max_tokens: int = 1024) -> str:
        raise ConnectionError("provider down")


class TestParseSuggestions:

    def test_accepts_wrapped_payload_and_old_keys(self):
        payload = {"suggestions": [
            {"title": "Gelato crawl", "duration": "45", "cost": "Free", "category": "restaurant"},
        ]}

        (suggestion,) = parse_suggestions(payload)

        assert suggestion.title == "Gelato crawl"
        assert suggestion.duration_minutes == 45
        assert suggestion.cost_estimate == "Free"
        assert suggestion.category == ActivityCategory.FOOD

    def test_drops_existing_and_duplicate_titles(self):
        payload = SUGGESTIONS + [{"title": "trastevere FOOD tour"}]

        result = parse_suggestions(payload, exclude_titles=["colosseum"])

        assert [s.title for s in result] == ["Trastevere food tour", "Appian Way by bike"]

    def test_unknown_category_and_bad_duration_fall_back(self):
        (suggestion,) = parse_suggestions([{"title": "Mystery", "category": "???", "duration_minutes": "long"}])

        assert suggestion.category == ActivityCategory.CULTURE
        assert suggestion.duration_minutes == 60

    def test_not_a_list(self):
        with pytest.raises(ExternalServiceError):
            parse_suggestions({"message": "sorry"})

    def test_nothing_usable(self):
        with pytest.raises(ExternalServiceError):
            parse_suggestions([{"title": ""}, "junk", {"title": "Colosseum"}], exclude_titles=["Colosseum"])


def test_extract_json_from_fenced_response():
    assert extract_json_text('Here you go:\n```json\n[{"title": "A"}]\n```') == '[{"title": "A"}]'
    assert extract_json_text("  [] ") == "[]"


def test_prompt_names_lodging_mood_and_exclusions():
    prompt = build_prompt("Rome", "Hotel Artemide", ["Colosseum", "colosseum ", "Pantheon"], "romantic", 5)

    assert "trip to Rome" in prompt
    assert "Hotel Artemide" in prompt
    assert "Mood of the suggestions: romantic." in prompt
    assert "Colosseum" in prompt and "Pantheon" in prompt
    assert "exactly 5 objects" in prompt


def test_prompt_without_lodging_or_exclusions():
    prompt = build_prompt("Lisbon", None, [], "foodie experiences", 3)

    assert "The lodging is not decided yet." in prompt
    assert "Do not suggest" not in prompt


class TestActivitySuggester:

    async def test_suggest_uses_seeded_mood(self):
        llm = MockLLMClient(json.dumps(SUGGESTIONS))
        suggester = ActivitySuggester(llm_client=llm, rng=random.Random(7))
        expected_mood = random.Random(7).choice(MOODS)

        mood, suggestions = await suggester.suggest("Rome", None, existing_titles=["Colosseum"])

        assert mood == expected_mood
        assert [s.title for s in suggestions] == ["Trastevere food tour", "Appian Way by bike"]
        assert f"Mood of the suggestions: {expected_mood}." in llm.prompts[0]

    async def test_malformed_json(self):
        suggester = ActivitySuggester(llm_client=MockLLMClient("I cannot help with that."))

        with pytest.raises(ExternalServiceError):
            await suggester.suggest("Rome", None)

    async def test_provider_failure(self):
        suggester = ActivitySuggester(llm_client=FailingLLMClient())

        with pytest.raises(ExternalServiceError) as exc:
            await suggester.suggest("Rome", None)
        assert "provider down" in exc.value.message


async def test_suggestions_unavailable_without_key(client, alice):
    trip = await create_trip(client, alice)

    response = await client.post(f"/api/trips/{trip['id']}/suggestions", json={}, headers=alice["headers"])

    assert response.status_code == 503
    assert response.json()["code"] == "SERVICE_UNAVAILABLE"


async def test_suggestions_exclude_planned_and_shown(client, alice):
    trip = await create_trip(client, alice, lodging_name="Hotel Artemide")
    day_id = trip["days"][0]["id"]
    await client.post(
        f"/api/trips/{trip['id']}/days/{day_id}/activities",
        json={"title": "Colosseum", "start_time": "09:00"},
        headers=alice["headers"],
    )
    llm = MockLLMClient("```json\n" + json.dumps(SUGGESTIONS) + "\n```")
    app.dependency_overrides[get_activity_suggester] = lambda: ActivitySuggester(llm_client=llm, rng=random.Random(1))

    response = await client.post(
        f"/api/trips/{trip['id']}/suggestions",
        json={"day_id": day_id, "already_suggested": ["Appian Way by bike"]},
        headers=alice["headers"],
    )

    assert response.status_code == 200
    data = response.json()
    assert data["mood"] in MOODS
    assert [s["title"] for s in data["suggestions"]] == ["Trastevere food tour"]
    assert "Colosseum" in llm.prompts[0]
    assert "Appian Way by bike" in llm.prompts[0]
    assert "Hotel Artemide" in llm.prompts[0]


async def test_accept_suggestion_creates_activity(client, alice):
    trip = await create_trip(client, alice)
    day_id = trip["days"][1]["id"]

    response = await client.post(
        f"/api/trips/{trip['id']}/days/{day_id}/suggestions/accept",
        json={"suggestion": SUGGESTIONS[0], "start_time": "18:00"},
        headers=alice["headers"],
    )

    assert response.status_code == 201
    (activity,) = response.json()["activities"]
    assert activity["title"] == "Trastevere food tour"
    assert activity["category"] == "food"
    assert activity["start_time"] == "18:00:00"
    assert activity["duration_minutes"] == 180


async def test_suggestions_for_foreign_day(client, alice):
    trip = await create_trip(client, alice)
    other = await create_trip(client, alice, title="Other", start_date="2025-09-01", end_date="2025-09-01")
    app.dependency_overrides[get_activity_suggester] = lambda: ActivitySuggester(llm_client=MockLLMClient("[]"))

    response = await client.post(
        f"/api/trips/{trip['id']}/suggestions",
        json={"day_id": other["days"][0]["id"]},
        headers=alice["headers"],
    )

    assert response.status_code == 404


class TestSuggestionClientFactory:

    def test_missing_key_is_unavailable(self):
        with pytest.raises(ServiceUnavailableError):
            get_suggestion_llm_client(Settings(llm_provider="ionet", ionet_api_key=""))

    def test_unknown_provider(self):
        with pytest.raises(ServiceUnavailableError):
            get_suggestion_llm_client(Settings(llm_provider="mystery"))

    def test_anthropic(self):
        client = get_suggestion_llm_client(Settings(llm_provider="anthropic", anthropic_api_key="sk-test"))

        assert isinstance(client, AnthropicLLMClient)
        assert client.temperature == 0.8

    def test_ionet(self):
        client = get_suggestion_llm_client(Settings(llm_provider="ionet", ionet_api_key="io-test"))

        assert isinstance(client, IoNetLLMClient)
        assert client.max_output_tokens == 1024
