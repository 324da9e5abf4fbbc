"""
iTunes Search API artwork lookup.

Free, no authentication required. The search returns 100x100 thumbnails;
the same URL with a larger size token serves a high-resolution variant.

Every failure (network error, timeout, non-200, empty or malformed response)
yields None: artwork lookup is an optional enrichment, never a hard
dependency.
"""

import threading
from typing import Any, Optional

import requests
from loguru import logger

SEARCH_URL = "https://itunes.apple.com/search"
THUMBNAIL_TOKEN = "100x100"
DEFAULT_ARTWORK_SIZE = "600x600"
DEFAULT_TIMEOUT = 5.0
DEFAULT_USER_AGENT = "trackart/0.1"


class ThreadLocalSession:
    """One requests.Session per calling thread, closed together.

    requests makes no thread-safety promise for a shared Session, so cover
    workers each get their own connection pool. Exposes the single method
    the lookup uses (``get``) and can be passed wherever a session is taken.
    """

    def __init__(self):
        self._local = threading.local()
        self._lock = threading.Lock()
        self._sessions: list[requests.Session] = []

    def session(self) -> requests.Session:
        """Return the calling thread's session, creating it on first use."""
        current = getattr(self._local, "session", None)
        if current is None:
            current = requests.Session()
            self._local.session = current
            with self._lock:
                self._sessions.append(current)
        return current

    def get(self, url: str, **kwargs: Any) -> requests.Response:
        return self.session().get(url, **kwargs)

    def close(self) -> None:
        with self._lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()

    def __enter__(self) -> "ThreadLocalSession":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def upgrade_artwork_url(url: Optional[str], size_token: str = DEFAULT_ARTWORK_SIZE) -> Optional[str]:
    """Convert a thumbnail artwork URL into its higher-resolution variant."""
    if not url:
        return None
    return url.replace(THUMBNAIL_TOKEN, size_token)


def _search_term(artist: Optional[str], title: Optional[str]) -> str:
    return " ".join(part.strip() for part in (artist, title) if part and part.strip())


def search_artwork_url(
    artist: Optional[str],
    title: Optional[str],
    session: Optional[requests.Session] = None,
    search_url: str = SEARCH_URL,
    limit: int = 1,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
) -> Optional[str]:
    """Search the catalog and return the first result's thumbnail artwork URL.

    Args:
        artist: Artist name
        title: Track title
        session: Optional requests session (module-level requests otherwise)
        search_url: Search endpoint
        limit: Maximum number of results requested
        timeout: Request timeout in seconds

    Returns:
        artworkUrl100 of the first result, or None
    """
    term = _search_term(artist, title)
    if not term:
        return None

    http = session or requests
    try:
        response = http.get(
            search_url,
            params={"term": term, "limit": limit},
            headers={"User-Agent": user_agent},
            timeout=timeout,
        )
    except requests.RequestException as e:
        logger.debug(f"iTunes search failed for {term!r}: {e}")
        return None

    if response.status_code != 200:
        logger.debug(f"iTunes search for {term!r} returned HTTP {response.status_code}")
        return None

    try:
        data: Any = response.json()
        result_count = int(data.get("resultCount", 0))
        if result_count <= 0:
            return None
        artwork_url = data["results"][0].get("artworkUrl100")
    except (ValueError, TypeError, KeyError, IndexError, AttributeError) as e:
        logger.warning(f"Malformed iTunes response for {term!r}: {e}")
        return None

    if not isinstance(artwork_url, str) or not artwork_url:
        return None
    return artwork_url


def download_artwork(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
) -> Optional[bytes]:
    """Download artwork bytes, or None on any failure or empty body."""
    http = session or requests
    try:
        response = http.get(url, headers={"User-Agent": user_agent}, timeout=timeout)
    except requests.RequestException as e:
        logger.debug(f"Artwork download failed for {url}: {e}")
        return None

    if response.status_code != 200:
        logger.debug(f"Artwork download {url} returned HTTP {response.status_code}")
        return None
    return response.content or None


def lookup_artwork(
    artist: Optional[str],
    title: Optional[str],
    session: Optional[requests.Session] = None,
    search_url: str = SEARCH_URL,
    limit: int = 1,
    artwork_size: str = DEFAULT_ARTWORK_SIZE,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
) -> Optional[bytes]:
    """Find and download high-resolution artwork for (artist, title).

    Returns:
        Raw image bytes, or None when no artwork is found
    """
    thumbnail_url = search_artwork_url(
        artist,
        title,
        session=session,
        search_url=search_url,
        limit=limit,
        timeout=timeout,
        user_agent=user_agent,
    )
    if not thumbnail_url:
        return None

    artwork_url = upgrade_artwork_url(thumbnail_url, artwork_size)
    data = download_artwork(artwork_url, session=session, timeout=timeout, user_agent=user_agent)
    if data:
        logger.debug(f"Downloaded iTunes artwork ({len(data)} bytes) for {artist} - {title}")
    return data
