"""EndpointResolver protocol and the values it exchanges.

The resolver is the port to the Peppol directory (SML/SMP).  Implementations
look up a participant's registered endpoint for one document type and process
and return ``None`` when the participant has no such registration.  They are
expected to be uncached; caching is the job of
:class:`~peppol_support.directory.cache.SupportCache`.
"""

from __future__ import annotations

import enum
import typing as typ

import msgspec

if typ.TYPE_CHECKING:
    from peppol_support.directory.identifiers import (
        DocumentTypeIdentifier,
        ParticipantIdentifier,
        ProcessIdentifier,
    )

TRANSPORT_PROFILE_PEPPOL_AS4_V2 = "peppol-transport-as4-v2_0"


class PeppolNetwork(enum.StrEnum):
    """Peppol network whose directory should be queried."""

    PRODUCTION = "production"
    TEST = "test"

    @property
    def sml_dns_zone(self) -> str:
        """Return the SML DNS zone used to locate participants' SMPs."""
        if self is PeppolNetwork.PRODUCTION:
            return "edelivery.tech.ec.europa.eu."
        return "acc.edelivery.tech.ec.europa.eu."


class Endpoint(msgspec.Struct, frozen=True, kw_only=True):
    """Connection details registered for a participant in its SMP.

    Attributes
    ----------
    endpoint_url
        URL of the receiving access point.
    transport_profile
        Transport profile the endpoint was registered for.
    certificate
        PEM or base64 encoded access point certificate, if published.
    service_description
        Free text description published with the endpoint.

    """

    endpoint_url: str
    transport_profile: str = TRANSPORT_PROFILE_PEPPOL_AS4_V2
    certificate: str | None = None
    service_description: str | None = None


@typ.runtime_checkable
class EndpointResolver(typ.Protocol):
    """Port for single, uncached directory lookups."""

    def resolve(
        self,
        participant: ParticipantIdentifier,
        document_type: DocumentTypeIdentifier,
        process: ProcessIdentifier,
        network: PeppolNetwork,
    ) -> Endpoint | None:
        """Return the registered endpoint or ``None`` when not registered.

        Raises
        ------
        Exception
            Any failure to complete the lookup.  Callers treat it as
            "not supported".

        """
        ...
