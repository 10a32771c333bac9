"""
Resolution errors.

Each stage of the resolution pipeline raises its own subclass of
``ResolutionError``. These never escape the batch orchestrator: they are caught
at the per-URI boundary and turned into an empty JSON object.
"""


class ResolutionError(Exception):
    """Base class for every expected failure while resolving an AT-URI."""

    kind = "resolution"


class InvalidATURI(ResolutionError):
    """The input is not an ``at://`` URI or has no authority."""

    kind = "invalid_uri"

    @staticmethod
    def missing_scheme() -> "InvalidATURI":
        return InvalidATURI("error-resolve-1000 URI must start with at://")

    @staticmethod
    def missing_authority() -> "InvalidATURI":
        return InvalidATURI("error-resolve-1001 URI is missing an authority")


class HandleResolutionError(ResolutionError):
    """The handle's well-known lookup failed or returned garbage."""

    kind = "handle"


class UnsupportedDidMethod(ResolutionError):
    """The DID uses a method other than plc or web."""

    kind = "unsupported_did_method"


class DidResolutionError(ResolutionError):
    """The DID document could not be fetched or decoded."""

    kind = "did"


class NoPDSEndpoint(ResolutionError):
    """The DID document does not advertise a PDS service."""

    kind = "no_pds"


class XRPCError(ResolutionError):
    """The PDS call failed."""

    kind = "xrpc"
