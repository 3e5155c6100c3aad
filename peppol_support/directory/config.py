"""Environment configuration for directory support caches.

Usage
-----
>>> import os
>>> os.environ["PEPPOL_SUPPORT_CACHE_HOURS"] = "2"
>>> config = SupportCacheConfig.from_env()
>>> config.max_cache_duration
datetime.timedelta(seconds=7200)

"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import os
import typing as typ

from peppol_support.directory.cache import DEFAULT_MAX_CACHE_DURATION
from peppol_support.directory.errors import SupportCacheConfigError
from peppol_support.directory.protocol import PeppolNetwork

if typ.TYPE_CHECKING:
    from peppol_support.directory.cache import SupportCache


@dc.dataclass(frozen=True, slots=True)
class SupportCacheConfig:
    """Settings shared by the MLR and MLS support caches.

    Attributes
    ----------
    network
        Peppol network to query.  Defaults to production.
    max_cache_duration
        Lifetime of cached lookups.  Defaults to six hours.

    """

    network: PeppolNetwork = PeppolNetwork.PRODUCTION
    max_cache_duration: dt.timedelta = DEFAULT_MAX_CACHE_DURATION

    @classmethod
    def from_env(cls) -> SupportCacheConfig:
        """Create configuration from environment variables.

        Reads ``PEPPOL_NETWORK`` (``production`` or ``test``) and
        ``PEPPOL_SUPPORT_CACHE_HOURS`` (positive number, fractions allowed).

        Raises
        ------
        SupportCacheConfigError
            If either variable holds an invalid value.

        """
        network = PeppolNetwork.PRODUCTION
        raw_network = os.environ.get("PEPPOL_NETWORK", "").strip().lower()
        if raw_network:
            try:
                network = PeppolNetwork(raw_network)
            except ValueError as exc:
                raise SupportCacheConfigError.invalid_network(raw_network) from exc

        duration = DEFAULT_MAX_CACHE_DURATION
        raw_hours = os.environ.get("PEPPOL_SUPPORT_CACHE_HOURS", "").strip()
        if raw_hours:
            try:
                hours = float(raw_hours)
            except ValueError as exc:
                msg = f"PEPPOL_SUPPORT_CACHE_HOURS must be a number, got: {raw_hours!r}"
                raise SupportCacheConfigError(msg) from exc
            if hours <= 0:
                raise SupportCacheConfigError.non_positive_duration(raw_hours)
            duration = dt.timedelta(hours=hours)

        return cls(network=network, max_cache_duration=duration)

    def apply(self, cache: SupportCache) -> SupportCache:
        """Apply the configured duration to ``cache`` and return it."""
        cache.max_cache_duration = self.max_cache_duration
        return cache
