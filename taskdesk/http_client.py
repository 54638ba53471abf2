"""Shared HTTP client for talking to the identity provider."""

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

_session: requests.Session | None = None


def get_session() -> requests.Session:
    """Return a shared requests.Session that retries idempotent GETs on 429/5xx.

    POSTs are never retried: an authorization code can be redeemed only once.
    Retries up to 3 times with exponential backoff (0.5s, 1s, 2s).
    """
    global _session
    if _session is None:
        _session = requests.Session()
        retry = Retry(
            total=3,
            backoff_factor=0.5,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        _session.mount("http://", adapter)
        _session.mount("https://", adapter)
    return _session
