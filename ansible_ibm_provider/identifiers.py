"""
Composite identifiers.

Some resources have no single server-assigned key, so the local identifier is
synthesized by joining the request path segments with `/`
(e.g. `public_cert/certificate_authorities/my-ca`). The provider never looks
inside a segment; it only joins and splits.
"""

from ansible_ibm_provider.errors import InvalidIdentifier

IDENTIFIER_DELIMITER = "/"


def join_identifier(*segments: str) -> str:
    """Joins key segments into a single identifier string."""
    for segment in segments:
        if not segment or IDENTIFIER_DELIMITER in segment:
            raise InvalidIdentifier(
                IDENTIFIER_DELIMITER.join(str(s) for s in segments), len(segments)
            )
    return IDENTIFIER_DELIMITER.join(segments)


def split_identifier(value: str, count: int) -> list[str]:
    """
    Splits an identifier back into exactly `count` segments.

    Raises:
        InvalidIdentifier: if the number of segments differs or one is empty.
    """
    parts = (value or "").split(IDENTIFIER_DELIMITER)
    if len(parts) != count or not all(parts):
        raise InvalidIdentifier(value, count)
    return parts
