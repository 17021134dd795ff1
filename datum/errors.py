from __future__ import annotations


class DatumError(Exception):
    """Base class for every error raised by the datum core."""


class CorruptEncoding(DatumError):
    """A stored blob does not decode to a well-formed document."""


class NotAMap(DatumError):
    def __init__(self, component: str):
        self.component = component
        super().__init__(f"{component} is not a map")


class CorruptAliasMapping(DatumError):
    """
    An alias token has no mapping, or maps to something other than a token string.
    """

    def __init__(self, token: str, reason: str = "no mapping"):
        self.token = token
        super().__init__(f"alias {token!r}: {reason}")


class PersistenceError(DatumError):
    """The blob store failed to read or write."""


class InvalidPath(DatumError, ValueError):
    pass


class UnsupportedValue(DatumError, TypeError):
    pass


class InvalidStoreKey(DatumError, ValueError):
    pass


class ReservedToken(DatumError):
    """The token names the reserved tenant that holds alias mappings."""
