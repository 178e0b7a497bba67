"""
Image asset directory listing, memoized per process.

The directory is read once on first use and kept until invalidate() is
called. Listing is sorted by filename so that ranking ties resolve the same
way on every platform.
"""

import logging
import os
import threading
from dataclasses import dataclass
from typing import Iterable, List, Optional
from urllib.parse import quote

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.webp', '.gif', '.svg')
DEFAULT_PUBLIC_PREFIX = '/productsPage'

# Characters left alone when a filename has to be percent-encoded
_URL_SAFE = "-_.!~*'()"
_PLAIN_FILENAME_CHARS = frozenset('abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_.-')


def public_path_for(filename: str, public_prefix: str = DEFAULT_PUBLIC_PREFIX) -> str:
    """
    URL path the web app serves ``filename`` under.

    Examples:
        'shineMuscat.png' -> '/productsPage/shineMuscat.png'
        '불고기.png'       -> '/productsPage/%EB%B6%88%EA%B3%A0%EA%B8%B0.png'
    """
    if all(ch in _PLAIN_FILENAME_CHARS for ch in filename):
        encoded = filename
    else:
        encoded = quote(filename, safe=_URL_SAFE)
    return f"{public_prefix.rstrip('/')}/{encoded}"


@dataclass(frozen=True)
class AssetFile:
    filename: str
    basename: str
    extension: str
    public_path: str

    @classmethod
    def from_filename(cls, filename: str, public_prefix: str = DEFAULT_PUBLIC_PREFIX) -> Optional['AssetFile']:
        """Build an AssetFile, or None when the name is not a whitelisted image."""
        if not filename or not isinstance(filename, str):
            return None
        dot = filename.rfind('.')
        if dot <= 0:
            return None
        extension = filename[dot:]
        if extension.lower() not in IMAGE_EXTENSIONS:
            return None
        basename = filename[:dot]
        return cls(
            filename=filename,
            basename=basename,
            extension=extension,
            public_path=public_path_for(filename, public_prefix),
        )


def build_assets(filenames: Iterable[str], public_prefix: str = DEFAULT_PUBLIC_PREFIX) -> List[AssetFile]:
    """Whitelist and sort raw filenames."""
    assets = []
    for name in sorted(set(filenames)):
        asset = AssetFile.from_filename(name, public_prefix)
        if asset is not None:
            assets.append(asset)
    return assets


class AssetDirectory:
    """
    Lazily listed, thread-safe view of one image directory.

    Usage:
        directory = AssetDirectory('./public/productsPage')
        assets = directory.list_assets()   # reads the disk once
        directory.invalidate()             # next call reads again
    """

    def __init__(self, path: str, public_prefix: str = DEFAULT_PUBLIC_PREFIX):
        self.path = path
        self.public_prefix = public_prefix
        self._lock = threading.Lock()
        self._assets: Optional[List[AssetFile]] = None

    def __repr__(self) -> str:
        return f"AssetDirectory({self.path!r}, public_prefix={self.public_prefix!r})"

    def list_assets(self) -> List[AssetFile]:
        cached = self._assets
        if cached is not None:
            return list(cached)
        with self._lock:
            if self._assets is None:
                try:
                    entries = [
                        name for name in os.listdir(self.path)
                        if os.path.isfile(os.path.join(self.path, name))
                    ]
                except OSError as e:
                    # not cached: the next call retries the read
                    logger.error("Failed to read image directory %s: %s", self.path, e)
                    return []
                self._assets = build_assets(entries, self.public_prefix)
                logger.info("Found %d image files in %s", len(self._assets), self.path)
            return list(self._assets)

    def invalidate(self) -> None:
        with self._lock:
            self._assets = None
