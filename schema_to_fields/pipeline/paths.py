"""
Normalization of document paths and in-document pointers.

Document paths are URI references (plain filesystem paths or URLs); base
and item paths are JSON pointers into a document. Both are always
normalized before they are used as registry keys.
"""

from __future__ import annotations

import posixpath
from urllib.parse import unquote, urljoin, urlsplit, urlunsplit

from ..utils import join_pointer, normalize_pointer
from .errors import MalformedPathError


def _check_text(value: object, what: str) -> str:
    if not isinstance(value, str):
        raise MalformedPathError(f"{what} must be a string, got {type(value).__name__}")
    if any(ord(c) < 0x20 or ord(c) == 0x7F for c in value):
        raise MalformedPathError(f"{what} contains control characters: {value!r}")
    return value


def normalize_doc_path(doc_path: object) -> str:
    """
    Normalize a document path.

    Args:
        doc_path: Plain path or URL of a document

    Returns:
        The path with dot segments and duplicate slashes removed

    Raises:
        MalformedPathError: If the path is not a valid URI reference
    """
    text = _check_text(doc_path, "Document path")
    try:
        parts = urlsplit(text)
    except ValueError as e:
        raise MalformedPathError(f"Invalid document path: {e}", doc_path=text) from e
    if parts.fragment:
        raise MalformedPathError("Document path must not carry a fragment", doc_path=text)
    if not parts.path and not parts.netloc:
        raise MalformedPathError("Document path is empty", doc_path=text or None)

    path = parts.path
    if path:
        normalized = posixpath.normpath(path)
        # normpath keeps a POSIX "//" root, collapse it
        if normalized.startswith("//"):
            normalized = "/" + normalized.lstrip("/")
        path = normalized
    return urlunsplit((parts.scheme, parts.netloc, path, parts.query, ""))


def normalize_base_path(base_path: object) -> str:
    """Normalize a base path: a JSON pointer, optionally written as a '#' fragment."""
    text = _check_text(base_path, "Base path")
    if text.startswith("#"):
        text = text[1:]
    if "#" in text:
        raise MalformedPathError(f"Base path has more than one fragment: {base_path!r}")
    try:
        urlsplit(text)
    except ValueError as e:
        raise MalformedPathError(f"Invalid base path: {e}") from e
    return normalize_pointer(unquote(text))


def item_path(base_path: str, name: str) -> str:
    """Pointer of a named schema inside its section."""
    if not isinstance(name, str) or not name:
        raise MalformedPathError(f"Schema name must be a non-empty string, got {name!r}")
    return join_pointer(normalize_base_path(base_path), name)


def resolve_document(current_doc: str, reference_path: str) -> str:
    """Resolve a relative document reference against the current document."""
    return normalize_doc_path(urljoin(current_doc, reference_path))
