from __future__ import annotations

import logging
import uuid
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from .document import SEPARATOR
from .errors import CorruptAliasMapping, InvalidPath

if TYPE_CHECKING:
    from .backend import DatumBackend

logger = logging.getLogger(__name__)

# Alias mappings live as ordinary documents under a reserved tenant.
RESERVED_TENANT = "_"
VIEWS_SPACE = "views"
ONETIME_SPACE = "onetime"

VIEW_PREFIX = "v-"
ONETIME_PREFIX = "o-"


class TokenKind(str, Enum):
    CANONICAL = "canonical"
    VIEW = "view"
    ONETIME = "onetime"


def classify(token: str) -> TokenKind:
    if len(token) <= 2:
        return TokenKind.CANONICAL
    if token.startswith(VIEW_PREFIX):
        return TokenKind.VIEW
    if token.startswith(ONETIME_PREFIX):
        return TokenKind.ONETIME
    return TokenKind.CANONICAL


def _is_token(target: object) -> bool:
    return isinstance(target, str) and bool(target)


class TokenGenerator(Protocol):
    def new_token(self) -> str:
        ...


class UUIDTokenGenerator(TokenGenerator):
    def new_token(self) -> str:
        return str(uuid.uuid4())


class TokenResolver:
    """
    Maps view and onetime alias tokens onto the canonical token they point at.

    View aliases resolve any number of times. A onetime alias is consumed by
    the resolution itself, before the caller gets to use the canonical token,
    so it is spent even if the caller's own read or write then fails.
    """

    def __init__(self, backend: DatumBackend) -> None:
        self._backend = backend

    def resolve(self, token: str) -> str:
        kind = classify(token)
        if kind is TokenKind.CANONICAL:
            return token

        if kind is TokenKind.VIEW:
            target = self._backend.get(RESERVED_TENANT, VIEWS_SPACE, token)
        else:
            target = self._backend.take(RESERVED_TENANT, ONETIME_SPACE, token, accept=_is_token)

        if target is None:
            raise CorruptAliasMapping(token)
        if not _is_token(target):
            raise CorruptAliasMapping(token, "mapping is not a token string")

        logger.debug("resolved %s alias", kind.value)
        return target

    def register_onetime(self, new_token: str, parent: str) -> None:
        """Make `new_token` a single-use alias for the canonical token `parent`."""
        if classify(new_token) is not TokenKind.ONETIME:
            raise ValueError(f"onetime tokens must start with {ONETIME_PREFIX!r}")
        if SEPARATOR in new_token:
            raise InvalidPath("alias tokens must not contain the path separator")
        if not parent or classify(parent) is not TokenKind.CANONICAL:
            raise ValueError("onetime aliases must point at a canonical token")
        self._backend.set(RESERVED_TENANT, ONETIME_SPACE, new_token, parent)
