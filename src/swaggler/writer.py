"""YAML serialization of generated OpenAPI documents."""

import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "swagger.yaml"


class _NoAliasDumper(yaml.SafeDumper):
    """SafeDumper that writes repeated objects in full instead of as aliases."""

    def ignore_aliases(self, data):
        return True


def dump_document(document: dict[str, Any]) -> str:
    return yaml.dump(
        document,
        Dumper=_NoAliasDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=float("inf"),
    )


def resolve_output_path(output_path: str | None = None, append_path: str | None = None) -> Path:
    """Pick the file to write: explicit output, else the appended file, else the default."""
    return Path(output_path or append_path or DEFAULT_OUTPUT)


def save_document(document: dict[str, Any], output_path: str | None = None, append_path: str | None = None) -> Path:
    """Write ``document`` as YAML, creating parent directories. Returns the path written."""
    path = resolve_output_path(output_path, append_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_document(document), encoding="utf-8")
    logger.debug("Wrote %d bytes to %s", path.stat().st_size, path)
    return path
