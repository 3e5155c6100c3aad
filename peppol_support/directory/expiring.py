"""Values paired with an absolute expiry instant."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import typing as typ

from peppol_support.common.time import utcnow

T = typ.TypeVar("T")


@dc.dataclass(frozen=True, slots=True)
class ExpiringEntry(typ.Generic[T]):
    """A cached value (possibly absent) and the instant it stops being valid.

    Attributes
    ----------
    value
        The cached value.  ``None`` records a negative result.
    expires_at
        Aware datetime from which the entry counts as expired.

    """

    value: T | None
    expires_at: dt.datetime

    @classmethod
    def of_duration(
        cls,
        value: T | None,
        duration: dt.timedelta,
        *,
        now: dt.datetime | None = None,
    ) -> ExpiringEntry[T]:
        """Create an entry expiring ``duration`` after ``now``."""
        start = now if now is not None else utcnow()
        return cls(value=value, expires_at=start + duration)

    def is_expired(self, now: dt.datetime | None = None) -> bool:
        """Return ``True`` once ``now`` has reached ``expires_at``."""
        instant = now if now is not None else utcnow()
        return instant >= self.expires_at
