"""
Field path projection for loosely typed API documents.

Documents are plain JSON-shaped values: dicts with string keys, lists and
scalars. A field path such as ``metadata.name`` addresses a value inside
nested dicts. Projection builds a reduced document holding only the requested
paths while preserving their original nesting.

Paths cannot address list elements, and literal dots inside keys cannot be
escaped (``metadata.labels.app.kubernetes.io/name`` is read as five segments).
"""

import copy
from typing import Any, Optional, Sequence, Union

# A Document is any JSON-shaped value; no schema is assumed.
Document = Any

FIELD_PATH_SEPARATOR = "."
FIELD_PATHS_DELIMITER = ","


class FieldPathError(ValueError):
    """Raised when a field path cannot be parsed."""

    pass


PathLike = Union[str, Sequence[str]]


def parse_field_path(path: str) -> list[str]:
    """
    Split a dot-delimited field path into its segments.

    Args:
        path: Field path, e.g. "status.containerStatuses"

    Returns:
        Ordered list of segment names

    Raises:
        FieldPathError: If the path is empty or has an empty segment

    Examples:
        >>> parse_field_path("metadata.name")
        ['metadata', 'name']
    """
    if not path:
        raise FieldPathError("field path is empty")

    segments = path.split(FIELD_PATH_SEPARATOR)
    if any(segment == "" for segment in segments):
        raise FieldPathError(f"field path has an empty segment: {path!r}")

    return segments


def _segments(path: PathLike) -> Optional[list[str]]:
    """Normalize a path string or segment sequence, None if invalid."""
    if isinstance(path, str):
        try:
            return parse_field_path(path)
        except FieldPathError:
            return None

    segments = list(path)
    if not segments or any(not isinstance(s, str) or s == "" for s in segments):
        return None
    return segments


def extract_field(doc: Document, path: PathLike) -> tuple[Document, bool]:
    """
    Read the value at a field path.

    Args:
        doc: Source document
        path: Field path string or list of segments

    Returns:
        Tuple of (value, found). When found is False the value is None.
    """
    segments = _segments(path)
    if segments is None:
        return None, False

    current = doc
    for segment in segments:
        if not isinstance(current, dict) or segment not in current:
            return None, False
        current = current[segment]

    return current, True


def set_field(target: dict, path: PathLike, value: Document) -> bool:
    """
    Write a value at a field path, creating intermediate dicts as needed.

    Keys that are not on the path are left untouched, so repeated calls on
    the same target compose. An intermediate key holding a non-dict value is
    replaced by a fresh dict (last write wins).

    Args:
        target: Dict to modify in place
        path: Field path string or list of segments
        value: Value to store at the last segment

    Returns:
        True if the value was written, False if the path is invalid
    """
    segments = _segments(path)
    if segments is None:
        return False

    current = target
    for segment in segments[:-1]:
        child = current.get(segment)
        if not isinstance(child, dict):
            child = {}
            current[segment] = child
        current = child

    current[segments[-1]] = value
    return True


def parse_field_paths(spec: Optional[str]) -> list[str]:
    """
    Parse a comma-separated projection request.

    Whitespace around each path is trimmed and blank entries are dropped,
    so "metadata.name, status.phase," yields two paths.
    """
    if not spec:
        return []
    return [p.strip() for p in spec.split(FIELD_PATHS_DELIMITER) if p.strip()]


def project_fields(doc: Document, paths: Sequence[str]) -> Document:
    """
    Build a document containing only the requested field paths.

    Args:
        doc: Source document (not modified)
        paths: Field path strings; surrounding whitespace is ignored

    Returns:
        ``doc`` itself when no paths are given, otherwise a new dict with
        the found paths in their original nesting. Paths that are absent
        from ``doc`` are skipped.
    """
    cleaned = [p.strip() for p in paths if p and p.strip()]
    if not cleaned:
        return doc

    projected: dict = {}
    for path in cleaned:
        value, found = extract_field(doc, path)
        if found:
            # Copy so the projection never shares containers with the source
            set_field(projected, path, copy.deepcopy(value))

    return projected
