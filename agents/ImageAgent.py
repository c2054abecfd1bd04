"""
Unsplash banner images for generated trips.

Falls back to a fixed placeholder photo when UNSPLASH_ACCESS_KEY is not set
or the search comes back empty, so planning never depends on the image API
being configured.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import requests

log = logging.getLogger(__name__)

_SEARCH_URL = "https://api.unsplash.com/search/photos"
_TIMEOUT = 10

_PLACEHOLDER_IMAGE: Dict[str, str] = {
    "url": "https://images.unsplash.com/photo-1488646953014-85cb44e25828?w=1600&fit=crop",
    "download_location": "",
    "photographerName": "",
    "photographerProfile": "",
}


def _get_access_key() -> str:
    """Read the key lazily so that dotenv has loaded by the time we need it."""
    return os.getenv("UNSPLASH_ACCESS_KEY", "")


def _auth_headers(key: str) -> Dict[str, str]:
    return {"Authorization": f"Client-ID {key}", "Accept-Version": "v1"}


def _to_descriptor(photo: Dict[str, Any]) -> Dict[str, str]:
    user = photo.get("user", {})
    return {
        "url": photo.get("urls", {}).get("regular", ""),
        "download_location": photo.get("links", {}).get("download_location", ""),
        "photographerName": user.get("name", ""),
        "photographerProfile": user.get("links", {}).get("html", ""),
    }


def fetch_banner_image(destination: str) -> Dict[str, str]:
    """Return ``{url, download_location, photographerName, photographerProfile}``
    for the best landscape photo of *destination*.

    HTTP errors from Unsplash are raised to the caller.
    """
    key = _get_access_key()
    if not key:
        log.warning("UNSPLASH_ACCESS_KEY not set; using placeholder banner for %s", destination)
        return dict(_PLACEHOLDER_IMAGE)

    resp = requests.get(
        _SEARCH_URL,
        params={"query": destination, "per_page": 1, "orientation": "landscape"},
        headers=_auth_headers(key),
        timeout=_TIMEOUT,
    )
    resp.raise_for_status()
    results = resp.json().get("results", [])
    if not results:
        log.warning("No Unsplash results for %s; using placeholder banner", destination)
        return dict(_PLACEHOLDER_IMAGE)
    return _to_descriptor(results[0])


def track_download(download_location: Optional[str]) -> None:
    """Tell Unsplash the photo was used (required by their API guidelines).

    Best effort: failures are logged and never raised.
    """
    if not download_location:
        return
    try:
        resp = requests.get(
            download_location,
            headers=_auth_headers(_get_access_key()),
            timeout=_TIMEOUT,
        )
        resp.raise_for_status()
    except requests.RequestException as exc:
        log.error("Error tracking Unsplash download: %s", exc)
