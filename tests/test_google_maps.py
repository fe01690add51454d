import threading

import pytest
import requests

from medfinder.models import GeoLocation
from medfinder.vendors import google_maps


class DummyResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError("http error")

    def json(self):
        return self._payload


class DummySession:
    def __init__(self):
        self.calls = []
        self.response = DummyResponse()

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        return self.response


@pytest.fixture
def session():
    return DummySession()


@pytest.fixture
def client(session):
    return google_maps.GoogleMapsClient("key", timeout=7, session=session)


def test_geocode_success(client, session):
    session.response = DummyResponse(
        payload={"status": "OK", "results": [{"geometry": {"location": {"lat": 12.5, "lng": 77.6}}}]}
    )

    origin = client.geocode("MG Road, Bengaluru")

    assert origin == GeoLocation(lat=12.5, lng=77.6)
    url, params, timeout = session.calls[0]
    assert url.endswith("/geocode/json")
    assert params == {"address": "MG Road, Bengaluru", "key": "key"}
    assert timeout == 7


@pytest.mark.parametrize(
    "payload",
    [
        {"status": "ZERO_RESULTS", "results": []},
        {"status": "REQUEST_DENIED", "error_message": "bad key"},
        {"status": "OK", "results": []},
    ],
)
def test_geocode_failures(client, session, payload):
    session.response = DummyResponse(payload=payload)
    with pytest.raises(google_maps.GeocodeError):
        client.geocode("nowhere")


def test_geocode_http_error_is_geocode_error(client, session):
    session.response = DummyResponse(status_code=500)
    with pytest.raises(google_maps.GeocodeError):
        client.geocode("nowhere")


def test_nearby_search_builds_request(client, session):
    session.response = DummyResponse(payload={"status": "OK", "results": [{"place_id": "p1"}]})

    results = client.nearby_search(GeoLocation(1.0, 2.0), 16093.4, "cardiologist")

    assert results == [{"place_id": "p1"}]
    url, params, _ = session.calls[0]
    assert "place/nearbysearch" in url
    assert params["location"] == "1.0,2.0"
    assert params["radius"] == 16093.4
    assert params["type"] == "doctor"
    assert params["keyword"] == "cardiologist"


def test_nearby_search_zero_results_is_search_error(client, session):
    session.response = DummyResponse(payload={"status": "ZERO_RESULTS", "results": []})
    with pytest.raises(google_maps.PlacesSearchError):
        client.nearby_search(GeoLocation(1.0, 2.0), 100, "surgeon")


def test_nearby_search_error_status(client, session):
    session.response = DummyResponse(payload={"status": "OVER_QUERY_LIMIT", "error_message": "limit"})
    with pytest.raises(google_maps.PlacesSearchError):
        client.nearby_search(GeoLocation(1.0, 2.0), 100, "surgeon")


def test_place_details_success(client, session):
    session.response = DummyResponse(payload={"status": "OK", "result": {"name": "Dr. Rao"}})

    result = client.place_details("pid")

    assert result["name"] == "Dr. Rao"
    _, params, _ = session.calls[0]
    assert params["place_id"] == "pid"
    assert params["fields"] == "name,formatted_address,formatted_phone_number,geometry"


def test_place_details_error(client, session):
    session.response = DummyResponse(payload={"status": "NOT_FOUND"})
    with pytest.raises(google_maps.PlaceDetailsError):
        client.place_details("pid")


def test_driving_distance_picks_smallest_ok_element(client, session):
    session.response = DummyResponse(
        payload={
            "status": "OK",
            "rows": [
                {
                    "elements": [
                        {"status": "OK", "distance": {"value": 5400}},
                        {"status": "ZERO_RESULTS"},
                        {"status": "OK", "distance": {"value": 3100}},
                    ]
                }
            ],
        }
    )

    assert client.driving_distance_meters(GeoLocation(0, 0), GeoLocation(0, 1)) == 3100.0


def test_driving_distance_none_without_ok_elements(client, session):
    session.response = DummyResponse(payload={"status": "OK", "rows": [{"elements": [{"status": "NOT_FOUND"}]}]})
    assert client.driving_distance_meters(GeoLocation(0, 0), GeoLocation(0, 1)) is None


def test_default_session_is_per_thread():
    client = google_maps.GoogleMapsClient("key")
    sessions = []

    def grab():
        sessions.append(client._session())

    worker = threading.Thread(target=grab)
    worker.start()
    worker.join()
    grab()

    assert isinstance(sessions[0], requests.Session)
    assert sessions[0] is not sessions[1]
    assert client._session() is sessions[1]


def test_injected_session_is_used_as_is(client, session):
    assert client._session() is session
