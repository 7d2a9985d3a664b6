# hfget/core/http.py
from __future__ import annotations
import logging
import urllib.parse
from typing import Dict, Optional

import requests
from requests.adapters import HTTPAdapter, Retry

from .. import __version__
from .errors import TransportError
from .utils import quote_path

logger = logging.getLogger(__name__)

HF_HOST = "huggingface.co"
UA = f"hfget/{__version__}"
REDIRECTS = (301, 302)

def make_session() -> requests.Session:
    retries = Retry(
        total=2, backoff_factor=0.3,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset(["GET", "HEAD"]),
        raise_on_status=False,
        redirect=False,
    )
    adapter = HTTPAdapter(max_retries=retries, pool_connections=10, pool_maxsize=10)
    s = requests.Session()
    s.mount("http://", adapter); s.mount("https://", adapter)
    s.headers.update({"User-Agent": UA})
    return s

SESSION = make_session()

def resolve_url(repo: str, path: str, host: str = HF_HOST) -> str:
    return f"https://{host}/{repo}/resolve/main/{quote_path(path)}"

def auth_headers(token: Optional[str]) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"} if token else {}

def open_stream(
    url: str,
    token: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> requests.Response:
    """
    Streaming GET that follows at most one 301/302 hop.
    The hop is re-issued without the Authorization header.
    Caller owns the returned response and must close it.
    """
    s = session or SESSION
    try:
        r = s.get(url, headers=auth_headers(token), stream=True, allow_redirects=False)
        if r.status_code in REDIRECTS:
            location = r.headers.get("Location")
            r.close()
            if not location:
                raise TransportError(f"Redirect without Location from {url}")
            target = urllib.parse.urljoin(url, location)
            logger.debug("Following redirect %s -> %s", url, target)
            r = s.get(target, stream=True, allow_redirects=False)
    except requests.RequestException as e:
        raise TransportError(f"Request failed: {url}", e) from e

    if 300 <= r.status_code < 400:
        r.close()
        raise TransportError(f"Too many redirects for {url} (HTTP {r.status_code})")
    if r.status_code >= 400:
        r.close()
        raise TransportError(f"HTTP {r.status_code} for {url}")
    return r
