"""
Unit tests for agents/ImageAgent.py

requests.get is patched throughout; no test talks to Unsplash.
"""
import pytest
import requests
from unittest.mock import MagicMock, patch

from agents import ImageAgent as ia


UNSPLASH_RESULT = {
    "results": [
        {
            "urls": {"regular": "https://images.unsplash.com/photo-1?w=1080"},
            "links": {"download_location": "https://api.unsplash.com/photos/1/download"},
            "user": {
                "name": "Jane Doe",
                "links": {"html": "https://unsplash.com/@janedoe"},
            },
        }
    ]
}


def _json_response(payload):
    resp = MagicMock()
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


class TestFetchBannerImageFallback:
    """Without UNSPLASH_ACCESS_KEY the placeholder is returned and no call is made."""

    def test_returns_placeholder(self, monkeypatch):
        monkeypatch.delenv("UNSPLASH_ACCESS_KEY", raising=False)
        with patch("agents.ImageAgent.requests.get") as mock_get:
            result = ia.fetch_banner_image("Paris")
        assert result == ia._PLACEHOLDER_IMAGE
        mock_get.assert_not_called()

    def test_placeholder_is_a_copy(self, monkeypatch):
        monkeypatch.delenv("UNSPLASH_ACCESS_KEY", raising=False)
        result = ia.fetch_banner_image("Paris")
        result["url"] = "changed"
        assert ia._PLACEHOLDER_IMAGE["url"] != "changed"


class TestFetchBannerImageUnsplash:
    def test_searches_with_expected_params(self, monkeypatch):
        monkeypatch.setenv("UNSPLASH_ACCESS_KEY", "abc123")
        with patch("agents.ImageAgent.requests.get",
                   return_value=_json_response(UNSPLASH_RESULT)) as mock_get:
            ia.fetch_banner_image("Kyoto")

        mock_get.assert_called_once_with(
            "https://api.unsplash.com/search/photos",
            params={"query": "Kyoto", "per_page": 1, "orientation": "landscape"},
            headers={"Authorization": "Client-ID abc123", "Accept-Version": "v1"},
            timeout=10,
        )

    def test_maps_first_result(self, monkeypatch):
        monkeypatch.setenv("UNSPLASH_ACCESS_KEY", "abc123")
        with patch("agents.ImageAgent.requests.get",
                   return_value=_json_response(UNSPLASH_RESULT)):
            result = ia.fetch_banner_image("Kyoto")

        assert result == {
            "url": "https://images.unsplash.com/photo-1?w=1080",
            "download_location": "https://api.unsplash.com/photos/1/download",
            "photographerName": "Jane Doe",
            "photographerProfile": "https://unsplash.com/@janedoe",
        }

    def test_no_results_returns_placeholder(self, monkeypatch):
        monkeypatch.setenv("UNSPLASH_ACCESS_KEY", "abc123")
        with patch("agents.ImageAgent.requests.get",
                   return_value=_json_response({"results": []})):
            assert ia.fetch_banner_image("Nowhere") == ia._PLACEHOLDER_IMAGE

    def test_http_error_propagates(self, monkeypatch):
        monkeypatch.setenv("UNSPLASH_ACCESS_KEY", "abc123")
        resp = MagicMock()
        resp.raise_for_status.side_effect = requests.HTTPError("401 Unauthorized")
        with patch("agents.ImageAgent.requests.get", return_value=resp):
            with pytest.raises(requests.HTTPError):
                ia.fetch_banner_image("Kyoto")


class TestTrackDownload:
    def test_skips_empty_location(self):
        with patch("agents.ImageAgent.requests.get") as mock_get:
            ia.track_download("")
            ia.track_download(None)
        mock_get.assert_not_called()

    def test_calls_download_location(self, monkeypatch):
        monkeypatch.setenv("UNSPLASH_ACCESS_KEY", "abc123")
        with patch("agents.ImageAgent.requests.get",
                   return_value=_json_response({})) as mock_get:
            ia.track_download("https://api.unsplash.com/photos/1/download")

        mock_get.assert_called_once_with(
            "https://api.unsplash.com/photos/1/download",
            headers={"Authorization": "Client-ID abc123", "Accept-Version": "v1"},
            timeout=10,
        )

    def test_request_errors_are_swallowed(self):
        with patch("agents.ImageAgent.requests.get",
                   side_effect=requests.ConnectionError("offline")):
            assert ia.track_download("https://api.unsplash.com/photos/1/download") is None

    def test_http_errors_are_swallowed(self):
        resp = MagicMock()
        resp.raise_for_status.side_effect = requests.HTTPError("500")
        with patch("agents.ImageAgent.requests.get", return_value=resp):
            ia.track_download("https://api.unsplash.com/photos/1/download")
