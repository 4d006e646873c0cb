"""
Field path projection over schema-less API documents.
"""

from k8s_mcp_server.projection.fieldpath import (
    Document,
    FieldPathError,
    extract_field,
    parse_field_path,
    parse_field_paths,
    project_fields,
    set_field,
)

__all__ = [
    "Document",
    "FieldPathError",
    "parse_field_path",
    "parse_field_paths",
    "extract_field",
    "set_field",
    "project_fields",
]
