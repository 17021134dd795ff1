from __future__ import annotations

import asyncio
import logging

from .backend import DatumBackend
from .errors import ReservedToken
from .tokens import ONETIME_PREFIX, RESERVED_TENANT, TokenGenerator, TokenResolver, UUIDTokenGenerator
from .values import Value

logger = logging.getLogger(__name__)


class AsyncDatumService:
    """
    Async facade used by the HTTP layer: resolves alias tokens, then runs the
    blocking backend call with asyncio.to_thread to keep the event loop free.
    """

    def __init__(self, backend: DatumBackend, *, token_generator: TokenGenerator | None = None) -> None:
        self._backend = backend
        self._resolver = TokenResolver(backend)
        self._tokens = token_generator if token_generator is not None else UUIDTokenGenerator()

    @property
    def backend(self) -> DatumBackend:
        return self._backend

    async def _canonical(self, token: str) -> str:
        if token == RESERVED_TENANT:
            raise ReservedToken("reserved token")
        canonical = await asyncio.to_thread(self._resolver.resolve, token)
        if canonical == RESERVED_TENANT:
            raise ReservedToken("alias points at the reserved token")
        return canonical

    async def create_token(self) -> str:
        return self._tokens.new_token()

    async def create_onetime(self, parent: str) -> str:
        if parent == RESERVED_TENANT:
            raise ReservedToken("reserved token")
        token = ONETIME_PREFIX + self._tokens.new_token()
        await asyncio.to_thread(self._resolver.register_onetime, token, parent)
        logger.info("registered onetime alias")
        return token

    async def get(self, token: str, space: str, path: str) -> Value | None:
        canonical = await self._canonical(token)
        return await asyncio.to_thread(self._backend.get, canonical, space, path)

    async def set(self, token: str, space: str, path: str, value: Value | None) -> None:
        canonical = await self._canonical(token)
        await asyncio.to_thread(self._backend.set, canonical, space, path, value)

    async def delete(self, token: str, space: str, path: str) -> None:
        await self.set(token, space, path, None)
