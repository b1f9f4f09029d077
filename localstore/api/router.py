"""
Request Routing Primitives

Provides:
- MethodKind: the closed set of request methods the adapter handles
- Request: method / url / data triple handed to the dispatcher
- parse_url: "/type/id" (or "/namespace/type/id") -> ResourceRef
- build_url: ResourceRef parts -> "/type/id"
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional
from urllib.parse import urlparse

from localstore.core import constants as C
from localstore.core.types import ResourceRef


class MethodKind(Enum):
    """Request methods with a registered handler."""
    GET = "GET"
    POST = "POST"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, method: str) -> Optional[MethodKind]:
        """Case-insensitive lookup; None for methods with no handler."""
        try:
            return cls(method.upper())
        except (ValueError, AttributeError):
            return None


@dataclass
class Request:
    """
    Storage request representation.

    `data` is the query mapping for GET and the {"data": record}
    payload for POST/PATCH; DELETE ignores it.
    """
    method: str
    url: Optional[str]
    data: Any = None

    @property
    def kind(self) -> Optional[MethodKind]:
        return MethodKind.parse(self.method)

    def target(self, model_namespace: Optional[str] = None) -> ResourceRef:
        return parse_url(self.url or "", model_namespace)


def parse_url(url: str, model_namespace: Optional[str] = None) -> ResourceRef:
    """
    Decompose a request path into (type, id).

    The first segment is the type and the second the id. When the first
    segment equals `model_namespace` it is folded into the type
    ("/admin/posts/1" -> "admin/posts", "1"). An empty or missing id
    means a collection request. Unknown types pass through unchecked.
    """
    parts = urlparse(url).path.split(C.URL_SEPARATOR)[1:]
    segments = iter(parts)

    resource_type = next(segments, "")
    resource_id = next(segments, None)

    if model_namespace is not None and resource_type == model_namespace:
        resource_type = f"{resource_type}{C.URL_SEPARATOR}{resource_id or ''}"
        resource_id = next(segments, None)

    return ResourceRef(resource_type=resource_type, resource_id=resource_id or None)


def build_url(resource_type: str, resource_id: Optional[str] = None) -> str:
    """Path for a type (collection) or a single resource."""
    url = f"{C.URL_SEPARATOR}{resource_type}"
    if resource_id is not None:
        url = f"{url}{C.URL_SEPARATOR}{resource_id}"
    return url
