"""Exception types raised by Third Brain.

Library code raises these; the CLI is the only layer that catches them and
turns them into an error message and a non-zero exit code.
"""


class ThirdBrainError(Exception):
    """Base class for all Third Brain failures."""


class NotFoundError(ThirdBrainError, LookupError):
    """A page title or item id is absent from the store."""


class IntegrityViolation(ThirdBrainError):
    """The stored outline breaks a structural invariant.

    Raised for items whose owner is neither or both of a page and a parent
    item, and for parent chains that never reach a page. Never repaired.
    """


class InvalidInputError(ThirdBrainError, ValueError):
    """A caller supplied an unusable argument (bad k, mismatched vectors, empty text)."""


class EmptyResultError(ThirdBrainError):
    """A similarity search ran against a store holding no vectors."""


class NumericContractViolation(ThirdBrainError, ArithmeticError):
    """A distance came out negative, NaN, or outside its metric's range."""


class ExternalProviderError(ThirdBrainError):
    """The embedding or chat provider failed after its retries were exhausted."""
