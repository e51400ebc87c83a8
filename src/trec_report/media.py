"""Remote photo download into a content-addressed cache, and local resolution.

The layout engine only ever sees local paths: :class:`MediaCache` runs
before rendering, :class:`ImageResolver` is consulted during rendering and
never touches the network.
"""

from __future__ import annotations

import dataclasses
import hashlib
import logging
import os
from typing import Iterable, Optional
from urllib.parse import urlparse

import requests

from .config import HTTP_TIMEOUT, IMAGE_SEARCH_DIRS, MEDIA_DIR, USER_AGENT

LOGGER = logging.getLogger(__name__)


def is_remote(ref: Optional[str]) -> bool:
    return bool(ref) and ref.lower().startswith(("http://", "https://"))


def cache_filename(url: str) -> str:
    """MD5 of the URL plus the extension of its path (``.jpg`` when there is none)."""
    ext = os.path.splitext(urlparse(url).path)[1] or ".jpg"
    return hashlib.md5(url.encode("utf-8")).hexdigest() + ext


def ensure_dir(p):
    os.makedirs(p, exist_ok=True)
    return p


class MediaCache:
    def __init__(self, cache_dir: str = MEDIA_DIR, session=None):
        self.cache_dir = cache_dir
        self.session = session or requests

    def path_for(self, url: str) -> str:
        return os.path.join(self.cache_dir, cache_filename(url))

    def fetch(self, url: str) -> Optional[str]:
        """Download ``url`` into the cache. Return the local path, or None on failure."""
        if not is_remote(url):
            return None
        local = self.path_for(url)
        if os.path.exists(local) and os.path.getsize(local) > 0:
            return local
        tmp = local + ".part"
        try:
            ensure_dir(self.cache_dir)
            headers = {"User-Agent": USER_AGENT}
            with self.session.get(url, stream=True, timeout=HTTP_TIMEOUT, headers=headers) as r:
                r.raise_for_status()
                with open(tmp, "wb") as f:
                    for chunk in r.iter_content(8192):
                        if chunk:
                            f.write(chunk)
            os.replace(tmp, local)
        except (requests.RequestException, OSError) as exc:
            LOGGER.warning("Failed to download image %s: %s", url, exc)
            if os.path.exists(tmp):
                os.remove(tmp)
            return None
        LOGGER.info("Downloaded image: %s -> %s", url, local)
        return local

    def _local(self, ref):
        if not is_remote(ref):
            return ref
        return self.fetch(ref) or ref

    def localize(self, record):
        """Copy of ``record`` with remote image URLs swapped for cached files."""
        sections = []
        for section in record.sections:
            items = []
            for item in section.line_items:
                comments = tuple(
                    dataclasses.replace(c, photos=tuple(self._local(p) for p in c.photos))
                    for c in item.comments
                )
                items.append(dataclasses.replace(item, comments=comments))
            sections.append(dataclasses.replace(section, line_items=tuple(items)))
        header = record.header_image_url
        return dataclasses.replace(
            record,
            header_image_url=self._local(header) if header else header,
            sections=tuple(sections),
        )


class ImageResolver:
    """Maps a photo reference to an existing local file, or None."""

    def __init__(self, search_dirs: Iterable[str] = IMAGE_SEARCH_DIRS, cache_dir: str = MEDIA_DIR):
        self.search_dirs = list(search_dirs)
        self.cache_dir = cache_dir

    def resolve(self, ref: Optional[str]) -> Optional[str]:
        if not ref:
            return None
        if is_remote(ref):
            cached = os.path.join(self.cache_dir, cache_filename(ref))
            return cached if os.path.isfile(cached) else None
        if os.path.isfile(ref):
            return ref if os.path.isabs(ref) else os.path.abspath(ref)
        for base in self.search_dirs:
            for candidate in (os.path.join(base, ref), os.path.join(base, os.path.basename(ref))):
                if os.path.isfile(candidate):
                    return candidate
        LOGGER.debug("Unresolved image reference %s", ref)
        return None

    __call__ = resolve
