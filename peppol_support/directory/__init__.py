"""Directory support: cached endpoint lookups per document type/process.

Public API
----------
SupportCache
    Lock-guarded expiring cache around an ``EndpointResolver``.
MLRSupportCache / MLSSupportCache
    Caches bound to the Peppol MLR and MLS document types.
EndpointResolver
    Protocol (port) for uncached directory lookups.
SupportCacheConfig
    Network and cache duration loaded from the environment.
"""

from __future__ import annotations

from .cache import DEFAULT_MAX_CACHE_DURATION, SupportCache
from .config import SupportCacheConfig
from .errors import (
    DirectoryError,
    DirectoryLookupError,
    InvalidIdentifierError,
    SupportCacheConfigError,
)
from .expiring import ExpiringEntry
from .identifiers import (
    DocumentTypeIdentifier,
    ParticipantIdentifier,
    ProcessIdentifier,
)
from .protocol import Endpoint, EndpointResolver, PeppolNetwork
from .support import MLRSupportCache, MLSSupportCache

__all__ = [
    "DEFAULT_MAX_CACHE_DURATION",
    "DirectoryError",
    "DirectoryLookupError",
    "DocumentTypeIdentifier",
    "Endpoint",
    "EndpointResolver",
    "ExpiringEntry",
    "InvalidIdentifierError",
    "MLRSupportCache",
    "MLSSupportCache",
    "ParticipantIdentifier",
    "PeppolNetwork",
    "ProcessIdentifier",
    "SupportCache",
    "SupportCacheConfig",
    "SupportCacheConfigError",
]
