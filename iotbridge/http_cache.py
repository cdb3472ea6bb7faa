"""JSON responses with ETag and Cache-Control handling."""

from __future__ import annotations

import hashlib
import json
import math
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, Optional, Union

JSON_CONTENT_TYPE = "application/json; charset=utf-8"

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


@dataclass
class JsonResponse:
    """An HTTP response: status, headers and body."""

    status: int
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)


def _marshal(obj: Any) -> bytes:
    text = json.dumps(obj, separators=(",", ":"), sort_keys=True, ensure_ascii=False)
    for char, escaped in _HTML_ESCAPES.items():
        text = text.replace(char, escaped)
    return text.encode("utf-8")


def cache_control_public(max_age: Union[float, timedelta]) -> str:
    """Cache-Control value for public caching, floored to whole seconds."""
    seconds = max_age.total_seconds() if isinstance(max_age, timedelta) else float(max_age)
    seconds = max(seconds, 0.0)
    return f"public, max-age={math.floor(seconds)}"


def compute_etag(body: bytes) -> str:
    """Hex MD5 digest of the body."""
    return hashlib.md5(body).hexdigest()


def is_not_modified(if_none_match: Optional[str], etag: str) -> bool:
    """Whether an If-None-Match header value (weak or strong) matches the etag."""
    if not if_none_match:
        return False
    if if_none_match.startswith("W/"):
        if_none_match = if_none_match[2:]
    return if_none_match == etag


def json_get_response(obj: Any, if_none_match: Optional[str] = None) -> JsonResponse:
    """Serialise obj, answering 304 when the client already holds it."""
    body = _marshal(obj)
    etag = compute_etag(body)
    if is_not_modified(if_none_match, etag):
        return JsonResponse(status=304)
    return JsonResponse(
        status=200,
        body=body,
        headers={"ETag": "W/" + etag, "Content-Type": JSON_CONTENT_TYPE},
    )


def error_body(message: str) -> bytes:
    """JSON body carrying an error message."""
    return _marshal({"message": message})