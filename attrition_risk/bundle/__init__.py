"""Model bundle package: schema validation, document sources and export."""

from .schema import Bundle, REQUIRED_KEYS, validate_bundle
from .io import (
    load_bundle,
    read_bundle_document,
    render_bundle_script,
    write_bundle_document,
)
from .export import export_bundle

__all__ = [
    "Bundle",
    "REQUIRED_KEYS",
    "validate_bundle",
    "load_bundle",
    "read_bundle_document",
    "render_bundle_script",
    "write_bundle_document",
    "export_bundle",
]
