"""Time-bounded cache of directory lookups for one document type/process.

``SupportCache`` answers "does participant X accept document type D with
process P, and where?" without querying the directory on every call.  Both
positive and negative results are cached for ``max_cache_duration``; a lookup
that fails (DNS, transport, protocol) is cached as "not supported" too, which
limits queries against a failing SMP to one per participant and duration.

Usage
-----
>>> cache = SupportCache(
...     network=PeppolNetwork.TEST,
...     document_type=MLR_DOCUMENT_TYPE,
...     process=MLR_PROCESS,
...     display_name="MLR",
...     resolver=my_resolver,
... )
>>> endpoint = cache.resolve(ParticipantIdentifier.of("0088:5798000000001"))

"""

from __future__ import annotations

import datetime as dt
import threading
import typing as typ

from peppol_support.common.time import utcnow
from peppol_support.directory.errors import SupportCacheConfigError
from peppol_support.directory.expiring import ExpiringEntry
from peppol_support.directory.identifiers import ParticipantIdentifier
from peppol_support.logging import get_logger, log_debug, log_error, log_info

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from peppol_support.directory.identifiers import (
        DocumentTypeIdentifier,
        ProcessIdentifier,
    )
    from peppol_support.directory.protocol import (
        Endpoint,
        EndpointResolver,
        PeppolNetwork,
    )

logger = get_logger(__name__)

DEFAULT_MAX_CACHE_DURATION = dt.timedelta(hours=6)

Clock: typ.TypeAlias = "cabc.Callable[[], dt.datetime]"


class SupportCache:
    """Cache directory endpoints per participant for a fixed document type.

    Parameters
    ----------
    network
        Peppol network (production or test) whose directory is queried.
    document_type
        Document type identifier to look up.
    process
        Process identifier to look up.
    display_name
        Short name of the document type, used in log messages only.
    resolver
        Directory resolver performing the uncached lookups.
    clock
        Callable returning the current aware datetime.  Defaults to UTC now.

    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        network: PeppolNetwork,
        document_type: DocumentTypeIdentifier,
        process: ProcessIdentifier,
        display_name: str,
        resolver: EndpointResolver,
        clock: Clock | None = None,
    ) -> None:
        """Bind the lookup parameters and start with an empty map."""
        if not display_name or not display_name.strip():
            msg = "display_name must not be empty"
            raise ValueError(msg)
        self._network = network
        self._document_type = document_type
        self._process = process
        self._display_name = display_name
        self._resolver = resolver
        self._clock: Clock = clock or utcnow
        self._max_cache_duration = DEFAULT_MAX_CACHE_DURATION
        self._entries: dict[str, ExpiringEntry[Endpoint]] = {}
        self._lock = threading.Lock()

    @property
    def network(self) -> PeppolNetwork:
        """Return the Peppol network queried by this cache."""
        return self._network

    @property
    def document_type(self) -> DocumentTypeIdentifier:
        """Return the document type looked up by this cache."""
        return self._document_type

    @property
    def process(self) -> ProcessIdentifier:
        """Return the process looked up by this cache."""
        return self._process

    @property
    def display_name(self) -> str:
        """Return the document type display name."""
        return self._display_name

    @property
    def max_cache_duration(self) -> dt.timedelta:
        """Return the duration applied to entries written from now on."""
        return self._max_cache_duration

    @max_cache_duration.setter
    def max_cache_duration(self, value: dt.timedelta) -> None:
        if value <= dt.timedelta(0):
            raise SupportCacheConfigError.non_positive_duration(value)
        self._max_cache_duration = value

    def __len__(self) -> int:
        """Return the number of entries, expired ones included."""
        with self._lock:
            return len(self._entries)

    def _lookup(self, key: str) -> tuple[bool, Endpoint | None]:
        """Return ``(hit, value)`` for ``key``, dropping an expired entry."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return (False, None)
            if entry.is_expired(now):
                del self._entries[key]
                return (False, None)
            return (True, entry.value)

    def _store(self, key: str, value: Endpoint | None) -> None:
        entry = ExpiringEntry.of_duration(
            value, self._max_cache_duration, now=self._clock()
        )
        with self._lock:
            self._entries[key] = entry

    def get_or_resolve(
        self,
        key: str,
        resolve: cabc.Callable[[], Endpoint | None],
    ) -> Endpoint | None:
        """Return the cached value for ``key`` or compute and cache it.

        ``resolve`` runs outside the lock, so concurrent misses on the same
        key may each call it; the last result written wins.  Exceptions from
        ``resolve`` propagate unchanged and nothing is cached.

        Parameters
        ----------
        key
            Canonical cache key.  Must not be empty.
        resolve
            Zero-argument callable producing the value on a miss.

        Returns
        -------
        Endpoint | None
            The cached or freshly resolved value.

        """
        if not key:
            msg = "cache key must not be empty"
            raise ValueError(msg)

        hit, value = self._lookup(key)
        if hit:
            log_debug(
                logger,
                "%s support for '%s' is taken from cache: %s",
                self._display_name,
                key,
                value is not None,
            )
            return value

        value = resolve()
        self._store(key, value)
        return value

    def resolve(self, participant: ParticipantIdentifier) -> Endpoint | None:
        """Return the participant's endpoint, or ``None`` when unsupported.

        Resolver failures are logged and cached as ``None``; they never
        propagate to the caller.

        Raises
        ------
        TypeError
            If ``participant`` is not a :class:`ParticipantIdentifier`.

        """
        if not isinstance(participant, ParticipantIdentifier):
            msg = f"participant must be a ParticipantIdentifier, got {type(participant).__name__}"
            raise TypeError(msg)

        key = participant.uri_encoded
        return self.get_or_resolve(key, lambda: self._query_directory(participant))

    def _query_directory(self, participant: ParticipantIdentifier) -> Endpoint | None:
        key = participant.uri_encoded
        log_info(
            logger,
            "Performing SMP query to check if '%s' supports %s or not",
            key,
            self._display_name,
        )
        try:
            endpoint = self._resolver.resolve(
                participant, self._document_type, self._process, self._network
            )
        except Exception as exc:  # noqa: BLE001 - any lookup failure means "not supported"
            log_error(
                logger,
                "Error performing SMP query for %s on '%s': %s",
                self._display_name,
                key,
                exc,
                exc_info=exc,
            )
            return None

        log_info(
            logger,
            "'%s' does support %s: %s",
            key,
            self._display_name,
            endpoint is not None,
        )
        return endpoint

    def invalidate(self, participant: ParticipantIdentifier) -> bool:
        """Drop the entry for ``participant``; return whether one existed."""
        with self._lock:
            return self._entries.pop(participant.uri_encoded, None) is not None

    def clear(self) -> None:
        """Drop every cached entry."""
        with self._lock:
            self._entries.clear()
