from __future__ import annotations

import httpx
import pytest

from apod_ratings.errors import ProviderError
from apod_ratings.provider import APODClient

RECORD = {
    "date": "2023-07-04",
    "explanation": "Fireworks over the galaxy.",
    "title": "Galactic Fireworks",
    "url": "https://apod.nasa.gov/apod/image/2307/fireworks.jpg",
    "media_type": "image",
    "service_version": "v1",
}


def test_fetch_random_returns_first_record(monkeypatch):
    captured = {}

    def fake_get(url, params=None, timeout=None):
        captured.update({"url": url, "params": params, "timeout": timeout})
        return httpx.Response(200, json=[RECORD])

    monkeypatch.setattr(httpx, "get", fake_get)

    client = APODClient("secret-key", api_url="https://api.example.com/apod/", timeout=3.0)
    image = client.fetch_random()

    assert image.url == RECORD["url"]
    assert image.title == RECORD["title"]
    assert captured["url"] == "https://api.example.com/apod"
    assert captured["params"] == {"api_key": "secret-key", "count": "1"}
    assert captured["timeout"] == 3.0


def test_fetch_random_accepts_single_object(monkeypatch):
    monkeypatch.setattr(httpx, "get", lambda url, params=None, timeout=None: httpx.Response(200, json=RECORD))

    image = APODClient("secret-key")()
    assert image.date == "2023-07-04"


def test_transport_error_hides_api_key(monkeypatch):
    def fake_get(url, params=None, timeout=None):
        raise httpx.ConnectError("connection refused for https://api.nasa.gov/?api_key=secret-key")

    monkeypatch.setattr(httpx, "get", fake_get)

    with pytest.raises(ProviderError) as excinfo:
        APODClient("secret-key").fetch_random()
    assert "secret-key" not in str(excinfo.value)
    assert "ConnectError" in str(excinfo.value)


def test_invalid_url_is_a_provider_error(monkeypatch):
    def fake_get(url, params=None, timeout=None):
        raise httpx.InvalidURL("Invalid port: 'nope'")

    monkeypatch.setattr(httpx, "get", fake_get)

    with pytest.raises(ProviderError, match="InvalidURL"):
        APODClient("secret-key", api_url="https://api.example.com:nope/apod").fetch_random()


def test_http_error_uses_provider_message(monkeypatch):
    detail = {"error": {"code": "API_KEY_INVALID", "message": "An invalid api_key was supplied."}}
    monkeypatch.setattr(httpx, "get", lambda url, params=None, timeout=None: httpx.Response(403, json=detail))

    with pytest.raises(ProviderError, match="invalid api_key"):
        APODClient("bad-key").fetch_random()


def test_http_error_without_json(monkeypatch):
    monkeypatch.setattr(httpx, "get", lambda url, params=None, timeout=None: httpx.Response(500, text="oops"))

    with pytest.raises(ProviderError, match="status 500"):
        APODClient("secret-key").fetch_random()


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="not json"),
        httpx.Response(200, json=[]),
        httpx.Response(200, json=[{"title": "no url"}]),
        httpx.Response(200, json="just a string"),
    ],
)
def test_malformed_responses_raise_provider_error(monkeypatch, response):
    monkeypatch.setattr(httpx, "get", lambda url, params=None, timeout=None: response)

    with pytest.raises(ProviderError):
        APODClient("secret-key").fetch_random()


def test_client_requires_api_key():
    with pytest.raises(ValueError):
        APODClient("  ")
    with pytest.raises(ValueError):
        APODClient("secret-key", api_url=" ")
