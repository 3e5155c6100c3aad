"""Unit tests for SupportCacheConfig."""

from __future__ import annotations

import datetime as dt
import os
from unittest import mock

import pytest

from peppol_support.directory import (
    DEFAULT_MAX_CACHE_DURATION,
    MLRSupportCache,
    PeppolNetwork,
    SupportCacheConfig,
    SupportCacheConfigError,
)
from tests.helpers.reporting_fakes import CountingResolver


def test_defaults_without_environment() -> None:
    """Production network and six hours apply by default."""
    with mock.patch.dict(os.environ, {}, clear=True):
        config = SupportCacheConfig.from_env()

    assert config.network is PeppolNetwork.PRODUCTION
    assert config.max_cache_duration == DEFAULT_MAX_CACHE_DURATION


def test_reads_network_and_hours() -> None:
    """Both variables are parsed; fractional hours are allowed."""
    env = {"PEPPOL_NETWORK": " TEST ", "PEPPOL_SUPPORT_CACHE_HOURS": "1.5"}
    with mock.patch.dict(os.environ, env, clear=True):
        config = SupportCacheConfig.from_env()

    assert config.network is PeppolNetwork.TEST
    assert config.max_cache_duration == dt.timedelta(minutes=90)


@pytest.mark.parametrize(
    ("env", "match"),
    [
        ({"PEPPOL_NETWORK": "staging"}, "PEPPOL_NETWORK"),
        ({"PEPPOL_SUPPORT_CACHE_HOURS": "soon"}, "must be a number"),
        ({"PEPPOL_SUPPORT_CACHE_HOURS": "0"}, "must be positive"),
        ({"PEPPOL_SUPPORT_CACHE_HOURS": "-2"}, "must be positive"),
    ],
)
def test_rejects_invalid_values(env: dict[str, str], match: str) -> None:
    """Invalid values raise SupportCacheConfigError."""
    with (
        mock.patch.dict(os.environ, env, clear=True),
        pytest.raises(SupportCacheConfigError, match=match),
    ):
        SupportCacheConfig.from_env()


def test_apply_sets_cache_duration() -> None:
    """apply copies the configured duration onto a cache."""
    config = SupportCacheConfig(max_cache_duration=dt.timedelta(hours=2))
    cache = MLRSupportCache(config.network, CountingResolver())

    assert config.apply(cache) is cache
    assert cache.max_cache_duration == dt.timedelta(hours=2)
