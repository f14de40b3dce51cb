"""Minimal HTTP JSON helpers for provider clients."""

from __future__ import annotations

import json
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..errors import ProviderTransportFailure


def post_json(url: str, payload: dict[str, Any], headers: dict[str, str], timeout_sec: float = 60.0) -> dict[str, Any]:
    """POST a JSON payload and decode the JSON response."""
    body = json.dumps(payload).encode("utf-8")
    request = Request(url=url, data=body, method="POST")
    request.add_header("Content-Type", "application/json")
    for key, value in headers.items():
        request.add_header(key, value)

    try:
        with urlopen(request, timeout=timeout_sec) as response:
            raw = response.read().decode("utf-8")
    except HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="replace")
        raise ProviderTransportFailure(f"HTTP {exc.code} from {url}: {detail}") from exc
    except URLError as exc:
        raise ProviderTransportFailure(f"Network error calling {url}: {exc.reason}") from exc
    except TimeoutError as exc:
        raise ProviderTransportFailure(f"Timed out after {timeout_sec}s calling {url}") from exc

    if not raw:
        return {}
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ProviderTransportFailure(f"Non-JSON body from {url}: {raw[:200]!r}") from exc
    if not isinstance(decoded, dict):
        raise ProviderTransportFailure(f"Unexpected JSON body from {url}: expected an object.")
    return decoded
