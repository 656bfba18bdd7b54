"""Image URL handling and byte acquisition."""

from __future__ import annotations

import logging
import re
from typing import Protocol

import requests
from requests.exceptions import RequestException

from sheetsync.core.errors import ImageFetchError, MutationError
from sheetsync.scene.mutator import NodeMutator, can_have_image_fill
from sheetsync.scene.nodes import SceneNode

LOGGER = logging.getLogger(__name__)

USER_AGENT = "SheetSync/1.0"

_DRIVE_FILE_ID = re.compile(r"/file/d/([a-zA-Z0-9_-]+)")
_DRIVE_ID_PARAM = re.compile(r"[?&]id=([a-zA-Z0-9_-]+)")


def is_image_url(value: str) -> bool:
    lowered = value.strip().lower()
    return lowered.startswith("http://") or lowered.startswith("https://")


def convert_to_direct_url(url: str) -> str:
    """Rewrite share links from Google Drive / Dropbox to direct downloads."""

    url = url.strip()
    if "drive.google.com" in url:
        m = _DRIVE_FILE_ID.search(url) or _DRIVE_ID_PARAM.search(url)
        if m:
            return f"https://drive.google.com/uc?export=download&id={m.group(1)}"
        return url
    if "dropbox.com" in url:
        if "dl=0" in url:
            return url.replace("dl=0", "dl=1")
        if "dl=1" not in url:
            return f"{url}{'&' if '?' in url else '?'}dl=1"
    return url


class ImageFetcher(Protocol):
    def fetch(self, url: str) -> bytes:
        """Return the raw bytes behind ``url``; raise :class:`ImageFetchError` on failure."""


class HttpImageFetcher:
    """Fetch image bytes over HTTP with a reusable session."""

    def __init__(self, *, timeout: float = 10.0, session: requests.Session | None = None) -> None:
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.setdefault("User-Agent", USER_AGENT)

    def fetch(self, url: str) -> bytes:
        LOGGER.info("image.fetch url=%s", url)
        try:
            response = self._session.get(url, timeout=self._timeout)
            response.raise_for_status()
        except RequestException as exc:
            raise ImageFetchError(f"{url}: {exc}") from exc
        content_type = response.headers.get("Content-Type", "")
        if content_type and not content_type.startswith("image/") and "octet-stream" not in content_type:
            raise ImageFetchError(f"{url}: unexpected content type {content_type}")
        if not response.content:
            raise ImageFetchError(f"{url}: empty body")
        return response.content


def sync_image(node: SceneNode, url: str, fetcher: ImageFetcher, mutator: NodeMutator) -> bool:
    if not can_have_image_fill(node):
        raise MutationError(f"cannot apply an image fill to {node.type.value} node {node.name!r}")
    data = fetcher.fetch(convert_to_direct_url(url))
    mutator.set_image_fill(node, data)
    return True


__all__ = [
    "HttpImageFetcher",
    "ImageFetcher",
    "convert_to_direct_url",
    "is_image_url",
    "sync_image",
]
