"""Merging a freshly generated document into an existing OpenAPI file."""

import logging
from pathlib import Path
from typing import Any

import yaml

from swaggler.errors import DuplicateOperationIdError, MergeError

logger = logging.getLogger(__name__)


def load_document(file_path: Path) -> dict[str, Any]:
    """Load an OpenAPI document from a YAML or JSON file.

    An empty file is treated as an empty document. ``paths``, ``components``
    and ``components.schemas`` must be mappings when present.
    """
    text = file_path.read_text(encoding="utf-8")
    doc = yaml.safe_load(text)
    if doc is None:
        return {}
    _require_mapping(doc, "top level")
    for key in ("paths", "components"):
        if doc.get(key) is not None:
            _require_mapping(doc[key], key)
    schemas = (doc.get("components") or {}).get("schemas")
    if schemas is not None:
        _require_mapping(schemas, "components.schemas")
    return doc


def _require_mapping(value: Any, where: str) -> None:
    if not isinstance(value, dict):
        raise ValueError(f"expected a mapping at {where}, got {type(value).__name__}")


def iter_operations(document: dict[str, Any]):
    """Yield ``(path, method, operation)`` for every operation mapping."""
    for path, methods in (document.get("paths") or {}).items():
        if not isinstance(methods, dict):
            continue
        for method, operation in methods.items():
            if isinstance(operation, dict):
                yield path, method, operation


def find_duplicate_operation_id(document: dict[str, Any], operation_id: str) -> tuple[str, str] | None:
    """Return ``(path, method)`` of the operation using ``operation_id``, if any."""
    for path, method, operation in iter_operations(document):
        if operation.get("operationId") == operation_id:
            return path, method
    return None


def merge_with_existing(document: dict[str, Any], existing_path: str | Path) -> dict[str, Any]:
    """Merge ``document`` into the document stored at ``existing_path``.

    Nothing is merged if any operation id of ``document`` is already used in
    the existing file. Otherwise ``paths`` and ``components.schemas`` are
    shallow unions in which the new entries win; everything else the
    existing file declares (``info``, ``servers``, other components) is kept.
    Neither input is modified.

    Raises:
        DuplicateOperationIdError: an operation id already exists.
        MergeError: the existing file cannot be read or parsed.
    """
    existing_path = Path(existing_path)
    try:
        existing = load_document(existing_path)
    except (OSError, UnicodeDecodeError, yaml.YAMLError, ValueError) as e:
        raise MergeError(
            "Failed to merge with existing OpenAPI specification",
            details={"path": str(existing_path), "cause": str(e)},
        ) from e

    for path, method, operation in iter_operations(document):
        operation_id = operation.get("operationId")
        if not operation_id:
            continue
        duplicate = find_duplicate_operation_id(existing, operation_id)
        if duplicate:
            raise DuplicateOperationIdError(operation_id, duplicate[0], duplicate[1], path, method)

    existing_components = existing.get("components") or {}
    new_components = document.get("components") or {}

    merged = {**document}
    for key, value in existing.items():
        if key not in ("paths", "components"):
            merged[key] = value
    merged["paths"] = {**(existing.get("paths") or {}), **(document.get("paths") or {})}
    merged["components"] = {
        **existing_components,
        **new_components,
        "schemas": {
            **(existing_components.get("schemas") or {}),
            **(new_components.get("schemas") or {}),
        },
    }

    logger.info("Merged %d path(s) into %s", len(document.get("paths") or {}), existing_path)
    return merged
