"""Root of the identity error taxonomy.

Every error raised by the identity, authorization and audit core derives
from IdentityError and carries a stable machine-readable ``code`` so the
presentation layer can map errors without string matching.
"""


class IdentityError(Exception):
    """Base class for all identity and access errors."""

    code: str = "identity_error"
