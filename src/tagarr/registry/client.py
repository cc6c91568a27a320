"""Radarr API client for movie and tag management.

This module provides an HTTP client for the Radarr v3 API, covering
connection validation, movie listing and the tag endpoints used to
classify movies.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from tagarr.config.models import RegistryConnectionConfig
from tagarr.registry.models import Item, Label, LabelOp

logger = logging.getLogger(__name__)


class RegistryUnavailable(Exception):
    """Raised when a Radarr request fails."""


class RegistryAuthError(RegistryUnavailable):
    """Raised when the Radarr API key is invalid."""


class RadarrClient:
    """HTTP client for Radarr v3 API.

    Implements the LabelRegistry protocol.
    """

    def __init__(self, config: RegistryConnectionConfig) -> None:
        """Initialize the client.

        Args:
            config: Connection configuration with URL and API key.
        """
        self.name = config.name
        self._base_url = config.url.rstrip("/")
        self._api_key = config.api_key
        self._timeout = config.timeout_seconds
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self._base_url,
                timeout=self._timeout,
                headers=self._headers(),
            )
        return self._client

    def _headers(self) -> dict[str, str]:
        """Get request headers with API key.

        Returns:
            Headers dictionary with X-Api-Key.
        """
        return {"X-Api-Key": self._api_key}

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> RadarrClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request and map transport and HTTP failures.

        Raises:
            RegistryAuthError: If API key is invalid (401).
            RegistryUnavailable: If connection or request fails.
        """
        client = self._get_client()
        try:
            response = client.request(method, path, **kwargs)
            if response.status_code == 401:
                raise RegistryAuthError(f"{self.name}: invalid API key")
            response.raise_for_status()
            return response
        except httpx.ConnectError as e:
            raise RegistryUnavailable(f"Cannot connect to {self.name}: {e}") from e
        except httpx.TimeoutException as e:
            raise RegistryUnavailable(f"{self.name}: connection timeout: {e}") from e
        except httpx.HTTPError as e:
            raise RegistryUnavailable(f"{self.name}: HTTP error: {e}") from e

    def get_status(self) -> dict[str, Any]:
        """Get Radarr system status.

        Returns:
            Status response from /api/v3/system/status.
        """
        return self._request("GET", "/api/v3/system/status").json()

    def validate_connection(self) -> bool:
        """Validate connection to Radarr.

        Returns:
            True if connection is valid.

        Raises:
            RegistryAuthError: If API key is invalid.
            RegistryUnavailable: If connection fails or the URL is not Radarr.
        """
        status = self.get_status()
        app_name = status.get("appName", "")
        if app_name != "Radarr":
            raise RegistryUnavailable(
                f"Expected Radarr at {self._base_url}, got {app_name or 'unknown'}"
            )
        logger.info(
            "Connected to %s (Radarr %s)",
            self.name,
            status.get("version", "unknown"),
        )
        return True

    def list_items(self) -> list[Item]:
        """Get all movies from Radarr."""
        data = self._request("GET", "/api/v3/movie").json()
        return [self._parse_movie_response(m) for m in data]

    def get_item(self, item_id: int) -> Item:
        """Get a single movie by its Radarr id."""
        data = self._request("GET", f"/api/v3/movie/{item_id}").json()
        return self._parse_movie_response(data)

    def list_labels(self) -> list[Label]:
        """Get all tags from Radarr."""
        data = self._request("GET", "/api/v3/tag").json()
        return [
            Label(id=t["id"], name=t["label"])
            for t in data
            if "id" in t and "label" in t
        ]

    def create_label(self, name: str) -> int:
        """Create a tag and return its id."""
        data = self._request("POST", "/api/v3/tag", json={"label": name}).json()
        logger.info("Created tag '%s' in %s (ID: %s)", name, self.name, data["id"])
        return data["id"]

    def edit_item_labels(
        self, item_ids: Sequence[int], label_ids: Sequence[int], op: LabelOp
    ) -> None:
        """Add or remove tags on many movies through the movie editor."""
        self._request(
            "PUT",
            "/api/v3/movie/editor",
            json={
                "movieIds": list(item_ids),
                "tags": list(label_ids),
                "applyTags": op.value,
            },
        )

    def delete_label(self, label_id: int) -> None:
        """Delete a tag definition."""
        self._request("DELETE", f"/api/v3/tag/{label_id}")

    def _parse_movie_response(self, data: dict[str, Any]) -> Item:
        """Parse movie JSON response to Item.

        Args:
            data: Movie JSON object from API.

        Returns:
            Item dataclass.
        """
        movie_file = data.get("movieFile") or {}
        media_info = movie_file.get("mediaInfo") or {}

        relative_path = movie_file.get("relativePath") or ""
        file_path = movie_file.get("path") or ""
        if not file_path and relative_path and data.get("path"):
            file_path = f"{data['path'].rstrip('/')}/{relative_path}"

        return Item(
            id=data["id"],
            title=data.get("title", ""),
            year=data.get("year") or 0,
            external_id=data.get("tmdbId") or None,
            has_file=bool(data.get("hasFile", False)),
            file_path=file_path,
            relative_path=relative_path,
            scene_name=movie_file.get("sceneName") or "",
            release_group=movie_file.get("releaseGroup") or "",
            dynamic_range_type=media_info.get("videoDynamicRangeType") or "",
            labels=frozenset(data.get("tags") or ()),
            poster_url=_poster_url(data),
        )


def _poster_url(data: dict[str, Any]) -> str | None:
    if remote := data.get("remotePoster"):
        return remote
    for image in data.get("images") or ():
        if image.get("coverType") == "poster":
            url = image.get("remoteUrl") or image.get("url")
            if url:
                return url
    return None
