"""
Utility functions for the schema to fields resolver.
"""

import posixpath
import re

# Regex pattern to split text into words, handling camelCase boundaries
_WORD_PATTERN = re.compile(r"[a-z]+|[A-Z][a-z]*|[0-9]+")


def _normalize_separators(text: str) -> str:
    """Normalize separators (underscores, hyphens, dots) to spaces."""
    return text.replace("_", " ").replace("-", " ").replace(".", " ")


def _split_into_words(text: str) -> list[str]:
    """Split text into words, handling camelCase boundaries."""
    return _WORD_PATTERN.findall(text)


def _capitalize_and_join(words: list[str]) -> str:
    """Capitalize each word and join them together."""
    return "".join(word.capitalize() for word in words if word)


def snake_to_pascal_case(text: str) -> str:
    """Convert snake_case, camelCase, or space-separated text to PascalCase.

    Examples:
        "first_name" -> "FirstName"
        "petId" -> "PetId"
        "x-rate-limit" -> "XRateLimit"
        "first 3 rows" -> "First3Rows"

    Args:
        text: The text to convert

    Returns:
        PascalCase string
    """
    if not text:
        return ""
    normalized = _normalize_separators(text)
    words = _split_into_words(normalized)
    return _capitalize_and_join(words)


def escape_pointer_token(token: str) -> str:
    """Escape a JSON pointer reference token (RFC 6901)."""
    return token.replace("~", "~0").replace("/", "~1")


def unescape_pointer_token(token: str) -> str:
    """Reverse escape_pointer_token."""
    return token.replace("~1", "/").replace("~0", "~")


def normalize_pointer(pointer: str) -> str:
    """Normalize a JSON pointer: leading slash, no duplicate or dot segments.

    The empty pointer (whole document) stays empty.
    """
    if not pointer or pointer == "/":
        return ""
    normalized = posixpath.normpath("/" + pointer.lstrip("/"))
    return "" if normalized == "/" else normalized


def join_pointer(base: str, token: str) -> str:
    """Append one (escaped) token to a JSON pointer.

    Examples:
        ("/components/schemas", "Pet") -> "/components/schemas/Pet"
        ("/components//schemas/", "a/b") -> "/components/schemas/a~1b"
    """
    return f"{normalize_pointer(base)}/{escape_pointer_token(token)}"


def split_pointer(pointer: str) -> list[str]:
    """Split a JSON pointer into unescaped tokens."""
    normalized = normalize_pointer(pointer)
    if not normalized:
        return []
    return [unescape_pointer_token(token) for token in normalized[1:].split("/")]
