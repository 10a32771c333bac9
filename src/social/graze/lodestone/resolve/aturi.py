from enum import IntEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from social.graze.lodestone.errors import InvalidATURI

AT_URI_SCHEME = "at://"


class ResolutionDepth(IntEnum):
    """How deep into a repository an AT-URI points.

    Determines which XRPC call is made against the PDS.
    """

    repository = 1
    collection = 2
    record = 3


class ATURI(BaseModel):
    """Parsed AT-URI.

    A record key is only ever set when a collection is also set.
    """

    model_config = ConfigDict(frozen=True)

    authority: str
    collection: Optional[str] = None
    record_key: Optional[str] = None

    @property
    def depth(self) -> ResolutionDepth:
        if not self.collection:
            return ResolutionDepth.repository
        if not self.record_key:
            return ResolutionDepth.collection
        return ResolutionDepth.record


def parse_aturi(uri: str) -> ATURI:
    """Split an AT-URI into authority, collection and record key.

    No decoding or syntax validation is done on the segments; bad values are
    left for the upstream services to reject. Segments past the record key are
    ignored, so ``at://a/b/c/d`` parses the same as ``at://a/b/c``.

    Args:
        uri: Raw AT-URI string

    Returns:
        ATURI with the parsed components

    Raises:
        InvalidATURI: If the scheme is missing or the authority is empty
    """
    if uri is None or not uri.startswith(AT_URI_SCHEME):
        raise InvalidATURI.missing_scheme()

    parts = uri.removeprefix(AT_URI_SCHEME).split("/")
    authority = parts[0]
    if len(authority) == 0:
        raise InvalidATURI.missing_authority()

    collection = parts[1] if len(parts) > 1 and parts[1] else None
    record_key = parts[2] if collection and len(parts) > 2 and parts[2] else None

    return ATURI(authority=authority, collection=collection, record_key=record_key)
