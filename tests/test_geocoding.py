"""
Tests for city autocomplete.
"""
import json

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from travel_planner.domain.errors import ExternalServiceError
from travel_planner.infrastructure.geocoding import (
    CityCandidate,
    GeocodingService,
    get_geocoding_service,
)
from travel_planner.main import app


def mock_http(mock_client_class, payload):
    mock_client = AsyncMock()
    mock_client_class.return_value.__aenter__.return_value = mock_client
    mock_response_obj = MagicMock()
    mock_response_obj.json.return_value = payload
    mock_response_obj.raise_for_status.return_value = None
    mock_client.get.return_value = mock_response_obj
    return mock_client


class TestGeocodingService:
    """Tests for GeocodingService."""

    @pytest.fixture
    def geocoding_service(self):
        return GeocodingService(base_url="https://geo.test/search", max_results=5, min_query_length=2)

    @pytest.mark.asyncio
    async def test_search_cities_success(self, geocoding_service):
        payload = {
            "results": [
                {"name": "Rome", "latitude": 41.89, "longitude": 12.51, "country": "Italy", "admin1": "Lazio"},
                {"name": "Rome", "latitude": 34.26, "longitude": -85.16, "country": "United States", "admin1": "Georgia"},
                {"name": "Broken", "latitude": None, "longitude": 1.0},
            ]
        }

        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = mock_http(mock_client_class, payload)
            results = await geocoding_service.search_cities("  Rom ")

        assert results == [
            CityCandidate(name="Rome", latitude=41.89, longitude=12.51, country="Italy", admin1="Lazio"),
            CityCandidate(name="Rome", latitude=34.26, longitude=-85.16, country="United States", admin1="Georgia"),
        ]
        _, kwargs = mock_client.get.call_args
        assert kwargs["params"]["name"] == "Rom"
        assert kwargs["params"]["count"] == 5

    @pytest.mark.asyncio
    async def test_no_results_key(self, geocoding_service):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_http(mock_client_class, {"generationtime_ms": 0.3})
            results = await geocoding_service.search_cities("Xyzzy")

        assert results == []

    @pytest.mark.asyncio
    async def test_short_query_makes_no_request(self, geocoding_service):
        with patch("httpx.AsyncClient") as mock_client_class:
            results = await geocoding_service.search_cities("R")

        assert results == []
        mock_client_class.assert_not_called()

    @pytest.mark.asyncio
    async def test_timeout(self, geocoding_service):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = AsyncMock()
            mock_client_class.return_value.__aenter__.return_value = mock_client
            mock_client.get.side_effect = httpx.TimeoutException("Timeout")

            with pytest.raises(ExternalServiceError):
                await geocoding_service.search_cities("Paris")

    @pytest.mark.asyncio
    async def test_non_json_body(self, geocoding_service):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_client = mock_http(mock_client_class, None)
            mock_client.get.return_value.json.side_effect = json.JSONDecodeError("Expecting value", "<html>", 0)

            with pytest.raises(ExternalServiceError):
                await geocoding_service.search_cities("Paris")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [["Paris"], "Paris", {"results": 3}, {"results": ["Paris"]}])
    async def test_unexpected_payload_yields_no_candidates(self, geocoding_service, payload):
        with patch("httpx.AsyncClient") as mock_client_class:
            mock_http(mock_client_class, payload)
            results = await geocoding_service.search_cities("Paris")

        assert results == []


def test_get_geocoding_service_singleton():
    import travel_planner.infrastructure.geocoding as geocoding_module
    geocoding_module._geocoding_service = None

    assert get_geocoding_service() is get_geocoding_service()


class FakeGeocoding:
    async def search_cities(self, query):
        return [CityCandidate(name="Lisbon", latitude=38.72, longitude=-9.14, country="Portugal")]


async def test_city_search_endpoint(client, alice):
    app.dependency_overrides[get_geocoding_service] = lambda: FakeGeocoding()

    response = await client.get("/api/places/cities", params={"q": "Lis"}, headers=alice["headers"])

    assert response.status_code == 200
    (city,) = response.json()["results"]
    assert city["name"] == "Lisbon"
    assert city["country"] == "Portugal"


async def test_city_search_endpoint_unreadable_answer(client, alice):
    app.dependency_overrides[get_geocoding_service] = lambda: GeocodingService(base_url="https://geo.test/search")

    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = mock_http(mock_client_class, None)
        mock_client.get.return_value.json.side_effect = json.JSONDecodeError("Expecting value", "<html>", 0)
        response = await client.get("/api/places/cities", params={"q": "Paris"}, headers=alice["headers"])

    assert response.status_code == 502
    assert response.json()["code"] == "EXTERNAL_SERVICE_ERROR"
