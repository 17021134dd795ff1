# datum_endpoints.py
from __future__ import annotations

import json
import logging
from typing import Any

import tomli_w
from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from datum.backend import DatumBackend
from datum.errors import (
    CorruptAliasMapping,
    DatumError,
    InvalidPath,
    InvalidStoreKey,
    NotAMap,
    ReservedToken,
    UnsupportedValue,
)
from datum.service import AsyncDatumService
from datum.values import EncryptedValue, Value, to_plain
from persistence.disk_store import DiskBlobStore
from persistence.paths import data_dir, tokens_dir
from settings import get_settings

router = APIRouter(tags=["datum"])
logger = logging.getLogger(__name__)

SETTINGS = get_settings()
DEBUG_LOG_REQUESTS = SETTINGS.debug_log_requests
DEBUG_LOG_TOKENS = SETTINGS.debug_log_tokens

TOKEN_HEADER = "Config-Token"
KEYID_HEADER = "Config-Encryption-KeyID"
DEFAULT_SPACE = "default"

JSON_MEDIA_TYPE = "application/json"
FORMAT_EXTENSIONS = (".json", ".toml")

DATUM = AsyncDatumService(DatumBackend(DiskBlobStore(tokens_dir(data_dir()))))


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------
def _mask(token: str) -> str:
    if DEBUG_LOG_TOKENS or len(token) <= 6:
        return token
    return token[:4] + "..."


def _log_request(method: str, token: str, space: str, path: str) -> None:
    if DEBUG_LOG_REQUESTS:
        logger.info("%s token=%s space=%s path=%s", method, _mask(token), space, path)


def _split_format(name: str) -> tuple[str, str]:
    for ext in FORMAT_EXTENSIONS:
        if name.endswith(ext):
            return name[: -len(ext)], ext
    return name, ""


def _to_path(key: str) -> str:
    return key.strip("/").replace("/", ".")


def _http_error(e: DatumError) -> HTTPException:
    if isinstance(e, (InvalidPath, UnsupportedValue, InvalidStoreKey)):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, ReservedToken):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, CorruptAliasMapping):
        return HTTPException(status_code=404, detail="unknown token")
    if isinstance(e, NotAMap):
        return HTTPException(status_code=409, detail=str(e))
    logger.warning("DATUM: server-side failure: %r", e)
    return HTTPException(status_code=500, detail="storage failure")


def _address(request: Request, first: str, rest: str) -> tuple[str, str]:
    """
    Pick (token, key) for routes where the token may come from the header.

    With a Config-Token header the whole URL path is the key; otherwise the
    first segment is the token and the remainder is the key.
    """
    header_token = request.headers.get(TOKEN_HEADER, "")
    if header_token:
        key = f"{first}/{rest}" if rest else first
        return header_token, key
    return first, rest


def _render(value: Value | None, *, as_json: bool, as_toml: bool) -> Response:
    if value is None:
        raise HTTPException(status_code=404, detail="not found")

    if isinstance(value, dict):
        payload = to_plain(value)
        if as_toml:
            return PlainTextResponse(tomli_w.dumps(payload), media_type="application/toml")
        return JSONResponse(payload)

    if isinstance(value, EncryptedValue):
        if as_json:
            return JSONResponse(to_plain(value))
        return Response(
            content=value.ciphertext,
            media_type="application/octet-stream",
            headers={KEYID_HEADER: value.key_id},
        )

    if as_json:
        return JSONResponse(value)
    text = value if isinstance(value, str) else json.dumps(value)
    return PlainTextResponse(f"{text}\n")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a storable number")


async def _read_value(request: Request) -> Any:
    body = await request.body()

    keyid = request.headers.get(KEYID_HEADER)
    if keyid:
        try:
            return EncryptedValue(key_id=keyid, ciphertext=body)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail="invalid encryption key id") from e

    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type == JSON_MEDIA_TYPE:
        try:
            return json.loads(body, parse_constant=_reject_constant)
        except (ValueError, RecursionError) as e:
            raise HTTPException(status_code=400, detail="invalid JSON body") from e

    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=400, detail="body is not UTF-8 text") from e


# -------------------------------------------------------------------
# Operations
# -------------------------------------------------------------------
async def _get(request: Request, token: str, space: str, key: str) -> Response:
    token = token or request.headers.get(TOKEN_HEADER, "")
    if not token:
        raise HTTPException(status_code=400, detail="no token provided")

    space = space or DEFAULT_SPACE
    as_json = request.headers.get("accept", "") == JSON_MEDIA_TYPE

    if key:
        key, ext = _split_format(key)
    else:
        space, ext = _split_format(space)
    as_json = as_json or ext == ".json"
    as_toml = ext == ".toml"

    path = _to_path(key)
    _log_request("GET", token, space, path)
    try:
        value = await DATUM.get(token, space, path)
    except DatumError as e:
        raise _http_error(e) from e
    return _render(value, as_json=as_json, as_toml=as_toml)


async def _put(request: Request, token: str, space: str, key: str) -> Response:
    if not token:
        raise HTTPException(status_code=400, detail="no token provided")

    key, _ = _split_format(key)
    path = _to_path(key)
    if not path:
        raise HTTPException(status_code=400, detail="no key provided")

    value = await _read_value(request)
    _log_request("PUT", token, space or DEFAULT_SPACE, path)
    try:
        await DATUM.set(token, space or DEFAULT_SPACE, path, value)
    except DatumError as e:
        raise _http_error(e) from e
    return Response(status_code=200)


async def _delete(request: Request, token: str, space: str, key: str) -> Response:
    if not token:
        raise HTTPException(status_code=400, detail="no token provided")

    path = _to_path(key)
    if not path:
        raise HTTPException(status_code=400, detail="no key provided")

    _log_request("DELETE", token, space or DEFAULT_SPACE, path)
    try:
        await DATUM.delete(token, space or DEFAULT_SPACE, path)
    except DatumError as e:
        raise _http_error(e) from e
    return Response(status_code=200)


# -------------------------------------------------------------------
# Token minting
# -------------------------------------------------------------------
@router.post("/create")
async def create_token() -> PlainTextResponse:
    token = await DATUM.create_token()
    logger.info("CREATE: minted token %s", _mask(token))
    return PlainTextResponse(f"{token}\n")


@router.post("/create/onetime/{parent}")
async def create_onetime_token(parent: str) -> PlainTextResponse:
    try:
        token = await DATUM.create_onetime(parent)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except DatumError as e:
        raise _http_error(e) from e
    return PlainTextResponse(f"{token}\n")


# -------------------------------------------------------------------
# Token and space in the path
# -------------------------------------------------------------------
@router.get("/{token}/~{space}")
@router.get("/{token}/~{space}/{key:path}")
async def get_in_space(request: Request, token: str, space: str, key: str = "") -> Response:
    return await _get(request, token, space, key)


@router.put("/{token}/~{space}")
@router.put("/{token}/~{space}/{key:path}")
async def put_in_space(request: Request, token: str, space: str, key: str = "") -> Response:
    return await _put(request, token, space, key)


@router.delete("/{token}/~{space}")
@router.delete("/{token}/~{space}/{key:path}")
async def delete_in_space(request: Request, token: str, space: str, key: str = "") -> Response:
    return await _delete(request, token, space, key)


# -------------------------------------------------------------------
# Space in the path, token in the header
# -------------------------------------------------------------------
@router.get("/~{space}")
@router.get("/~{space}/{key:path}")
async def get_in_header_space(request: Request, space: str, key: str = "") -> Response:
    return await _get(request, "", space, key)


@router.put("/~{space}")
@router.put("/~{space}/{key:path}")
async def put_in_header_space(request: Request, space: str, key: str = "") -> Response:
    return await _put(request, request.headers.get(TOKEN_HEADER, ""), space, key)


@router.delete("/~{space}")
@router.delete("/~{space}/{key:path}")
async def delete_in_header_space(request: Request, space: str, key: str = "") -> Response:
    return await _delete(request, request.headers.get(TOKEN_HEADER, ""), space, key)


# -------------------------------------------------------------------
# Default space
# -------------------------------------------------------------------
@router.get("/{first}")
@router.get("/{first}/{rest:path}")
async def get_default(request: Request, first: str, rest: str = "") -> Response:
    token, key = _address(request, first, rest)
    return await _get(request, token, DEFAULT_SPACE, key)


@router.put("/{first}")
@router.put("/{first}/{rest:path}")
async def put_default(request: Request, first: str, rest: str = "") -> Response:
    token, key = _address(request, first, rest)
    return await _put(request, token, DEFAULT_SPACE, key)


@router.delete("/{first}")
@router.delete("/{first}/{rest:path}")
async def delete_default(request: Request, first: str, rest: str = "") -> Response:
    token, key = _address(request, first, rest)
    return await _delete(request, token, DEFAULT_SPACE, key)
