"""Ready-made support caches for Peppol MLR and MLS responses."""

from __future__ import annotations

import typing as typ

from peppol_support.directory.cache import SupportCache
from peppol_support.directory.identifiers import (
    MLR_DOCUMENT_TYPE,
    MLR_PROCESS,
    MLS_DOCUMENT_TYPE,
    MLS_PROCESS,
)

if typ.TYPE_CHECKING:
    from peppol_support.directory.cache import Clock
    from peppol_support.directory.identifiers import ParticipantIdentifier
    from peppol_support.directory.protocol import (
        Endpoint,
        EndpointResolver,
        PeppolNetwork,
    )


class MLRSupportCache(SupportCache):
    """Checks whether the sender (C1) of a business document accepts MLRs."""

    def __init__(
        self,
        network: PeppolNetwork,
        resolver: EndpointResolver,
        *,
        clock: Clock | None = None,
    ) -> None:
        """Bind the cache to the Peppol BIS MLR 3 document type and process."""
        super().__init__(
            network=network,
            document_type=MLR_DOCUMENT_TYPE,
            process=MLR_PROCESS,
            display_name="MLR",
            resolver=resolver,
            clock=clock,
        )

    def get_mlr_endpoint(self, c1_id: ParticipantIdentifier) -> Endpoint | None:
        """Return the MLR endpoint registered for C1, if any."""
        return self.resolve(c1_id)


class MLSSupportCache(SupportCache):
    """Checks whether the sending access point (C2) accepts MLS messages."""

    def __init__(
        self,
        network: PeppolNetwork,
        resolver: EndpointResolver,
        *,
        clock: Clock | None = None,
    ) -> None:
        """Bind the cache to the Peppol MLS document type and process."""
        super().__init__(
            network=network,
            document_type=MLS_DOCUMENT_TYPE,
            process=MLS_PROCESS,
            display_name="MLS",
            resolver=resolver,
            clock=clock,
        )

    def get_mls_endpoint(self, c2_id: ParticipantIdentifier) -> Endpoint | None:
        """Return the MLS endpoint registered for C2, if any."""
        return self.resolve(c2_id)
