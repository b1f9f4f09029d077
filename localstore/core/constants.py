"""
System-Wide Constants for the Local Storage Adapter

All fixed strings and defaults centralized here.
"""

from typing import Final

# =============================================================================
# STORAGE KEYS
# =============================================================================
# Joins namespace, type and id. Never escaped: types and ids must not contain it.
KEY_SEPARATOR: Final[str] = "-"

# Middle segment of persisted index keys: "<namespace>-__index__-<type>"
INDEX_KEY_SEGMENT: Final[str] = "__index__"

DEFAULT_NAMESPACE: Final[str] = ""

# =============================================================================
# URLS
# =============================================================================
URL_SEPARATOR: Final[str] = "/"

# =============================================================================
# REQUEST PAYLOADS
# =============================================================================
DATA_MEMBER: Final[str] = "data"
FILTER_MEMBER: Final[str] = "filter"
ATTRIBUTES_MEMBER: Final[str] = "attributes"
RELATIONSHIPS_MEMBER: Final[str] = "relationships"

# =============================================================================
# HTTP-LIKE STATUS CODES
# =============================================================================
STATUS_NOT_FOUND: Final[int] = 404
STATUS_METHOD_NOT_ALLOWED: Final[int] = 405
STATUS_BAD_REQUEST: Final[int] = 400

# =============================================================================
# BULK TRANSFER
# =============================================================================
LZ4_FRAME_MAGIC: Final[bytes] = b"\x04\x22\x4d\x18"

# =============================================================================
# ENVIRONMENT
# =============================================================================
ENV_PREFIX: Final[str] = "LOCALSTORE"
