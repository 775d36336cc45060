"""
Exceptions for the kemkit core module
Everything derives from KEMError so callers have one general error catcher.
The misuse errors also inherit the matching built-in so idiomatic handlers
(``except IndexError`` and friends) keep working.
"""


class KEMError(Exception):
    # general container for errors
    pass


class InvalidKeyError(KEMError, ValueError):
    # raised when a key is missing or not accepted by the algorithm/configuration
    pass


class InvalidParameterError(KEMError, ValueError):
    # raised when a parameter spec is invalid, or required but absent
    pass


class SecretRangeError(KEMError, IndexError):
    # raised when start/end violate 0 <= start <= end <= secret_size
    pass


class UnsupportedCombinationError(KEMError, NotImplementedError):
    # raised when a (start, end, algorithm) combination is valid but not implemented
    pass


class MissingArgumentError(KEMError, TypeError):
    # raised when a required argument is None
    pass


class DecapsulateError(KEMError):
    """Raised when an encapsulation message cannot be decapsulated.

    Carries one fixed message on purpose: wrong length, bad encoding and a
    mismatching key must all look the same to the caller.
    """

    MESSAGE = "decapsulation failed"

    def __init__(self):
        super().__init__(self.MESSAGE)
