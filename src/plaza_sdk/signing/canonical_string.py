"""
Canonical string construction for Plaza request signatures

The canonical string is the newline-joined sequence of method, Content-MD5,
content type, date and target path. Empty fields stay in place so the
server can rebuild exactly the same string from the received request.
"""

from typing import Dict, List

from .types import RequestDescriptor, SigningError, SigningErrorCodes
from .utils import calculate_content_md5, validate_http_date


CANONICAL_FIELDS = ('method', 'content_md5', 'content_type', 'date', 'path')
SEPARATOR = '\n'


class CanonicalStringBuilder:
    """
    Canonical string builder for a single request
    """

    def __init__(self, descriptor: RequestDescriptor, date: str):
        """
        Initialize canonical string builder.

        Args:
            descriptor: Request being signed
            date: HTTP-date that will be sent in the Date header
        """
        self.descriptor = descriptor
        self.date = date

    def build(self) -> str:
        """
        Build the canonical string for signing.

        Returns:
            str: Canonical string

        Raises:
            SigningError: If the date is not a valid HTTP-date
        """
        if not validate_http_date(self.date):
            raise SigningError(
                f"Invalid HTTP date: {self.date!r}",
                SigningErrorCodes.INVALID_DATE,
                {"date": self.date}
            )

        return SEPARATOR.join(self.fields())

    def fields(self) -> List[str]:
        """Canonical fields in their fixed order."""
        return [
            self.descriptor.method.value,
            calculate_content_md5(self.descriptor.body),
            self.descriptor.content_type or "",
            self.date,
            self.descriptor.path,
        ]


def build_canonical_string(descriptor: RequestDescriptor, date: str) -> str:
    """
    Build canonical string for signing.

    Args:
        descriptor: Request descriptor
        date: HTTP-date sent with the request

    Returns:
        str: Canonical string
    """
    return CanonicalStringBuilder(descriptor, date).build()


def split_canonical_string(canonical_string: str) -> Dict[str, str]:
    """
    Split a canonical string back into its named fields.

    Args:
        canonical_string: Canonical string produced by build_canonical_string

    Returns:
        dict: Field name to value

    Raises:
        ValueError: If the string does not have exactly five fields
    """
    parts = canonical_string.split(SEPARATOR)
    if len(parts) != len(CANONICAL_FIELDS):
        raise ValueError(
            f"Canonical string must have {len(CANONICAL_FIELDS)} fields, got {len(parts)}"
        )
    return dict(zip(CANONICAL_FIELDS, parts))
