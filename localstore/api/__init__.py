"""
API module: remote-API-shaped request handling over key-value storage.
"""

from localstore.api.router import MethodKind, Request, build_url, parse_url
from localstore.api.dispatcher import RequestDispatcher
from localstore.api.transfer import RecordTransfer
from localstore.api.adapter import LocalStorageAdapter

__all__ = [
    "MethodKind",
    "Request",
    "build_url",
    "parse_url",
    "RequestDispatcher",
    "RecordTransfer",
    "LocalStorageAdapter",
]
