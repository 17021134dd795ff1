from __future__ import annotations

from typing import Any

from .errors import InvalidPath, NotAMap
from .values import MAX_DEPTH, Document, Value, check_value, copy_value

SEPARATOR = "."


def split_path(path: str) -> tuple[list[str], str]:
    """
    Split a dotted path into (ancestors, leaf).

    Raises InvalidPath for empty components and for paths longer than MAX_DEPTH.
    """
    parts = path.split(SEPARATOR)
    if any(not p for p in parts):
        raise InvalidPath(f"invalid key path {path!r}")
    if len(parts) > MAX_DEPTH:
        raise InvalidPath(f"key path has more than {MAX_DEPTH} components")
    return parts[:-1], parts[-1]


def get_path(doc: Document, path: str) -> tuple[Value | None, bool]:
    """
    Look up `path` in `doc`. The empty path returns the whole document.

    Never raises: a missing or non-map ancestor simply means "not found".
    """
    if path == "":
        return doc, True
    *ancestors, leaf = path.split(SEPARATOR)
    node: Any = doc
    for name in ancestors:
        node = node.get(name)
        if not isinstance(node, dict):
            return None, False
    if leaf not in node:
        return None, False
    return node[leaf], True


def set_path(doc: Document, path: str, value: Value | None) -> Document:
    """
    Write `value` at `path` (None deletes) and return the document.

    `doc` is modified in place. Missing intermediate maps are created on write;
    descending through a non-map raises NotAMap. Empty maps are pruned afterwards.
    """
    if path == "":
        raise InvalidPath("whole-document writes are not supported")
    ancestors, leaf = split_path(path)
    if value is None:
        _remove(doc, ancestors, leaf)
    else:
        check_value(value, len(ancestors) + 1)
        _assign(doc, ancestors, leaf, copy_value(value))
    prune(doc)
    return doc


def _assign(node: Document, ancestors: list[str], leaf: str, value: Value) -> Document:
    if not ancestors:
        node[leaf] = value
        return node
    name, rest = ancestors[0], ancestors[1:]
    if name in node:
        child = node[name]
        if not isinstance(child, dict):
            raise NotAMap(name)
    else:
        child = {}
    # attach after the recursive call so a failure deeper down leaves no new maps behind
    node[name] = _assign(child, rest, leaf, value)
    return node


def _remove(node: Document, ancestors: list[str], leaf: str) -> Document:
    if not ancestors:
        node.pop(leaf, None)
        return node
    name, rest = ancestors[0], ancestors[1:]
    if name not in node:
        return node
    child = node[name]
    if not isinstance(child, dict):
        raise NotAMap(name)
    _remove(child, rest, leaf)
    return node


def prune(node: Document) -> Document:
    """Recursively drop nested maps that are (or become) empty."""
    for key in list(node):
        child = node[key]
        if isinstance(child, dict):
            prune(child)
            if not child:
                del node[key]
    return node
