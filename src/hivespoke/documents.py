"""
YAML codec and the on-disk layout of spoke declarations.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from hivespoke.config.defaults import (
    COLLAB_DIR,
    MANIFEST_FILENAME,
    STATUS_FILENAME,
)
from hivespoke.errors import DocumentMissingError, DocumentUnparseableError

logger = logging.getLogger(__name__)

MANIFEST_PATH = f"{COLLAB_DIR}/{MANIFEST_FILENAME}"
STATUS_PATH = f"{COLLAB_DIR}/{STATUS_FILENAME}"


def decode_yaml(text: str, source: str = "<string>") -> Any:
    """Decode YAML text, raising DocumentUnparseableError on syntax errors."""
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DocumentUnparseableError(f"{source}: invalid YAML ({e})") from e


def load_yaml(path: Path) -> Any:
    """Read and decode a YAML file."""
    path = Path(path)
    if not path.exists():
        raise DocumentMissingError(str(path))
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise DocumentUnparseableError(f"{path}: not valid UTF-8 ({e.reason})") from e
    except OSError as e:
        raise DocumentUnparseableError(f"{path}: cannot read ({e})") from e
    return decode_yaml(text, source=str(path))


def yaml_exists(path: Path) -> bool:
    return Path(path).exists()


def dump_yaml(data: Any) -> str:
    return yaml.dump(
        data,
        Dumper=yaml.SafeDumper,
        indent=2,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=float("inf"),
    )


def write_yaml(path: Path, data: Any, header: Optional[str] = None) -> None:
    """Write ``data`` as YAML, preceded by an optional comment header."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    body = dump_yaml(data)
    content = f"{header}\n{body}" if header else body
    path.write_text(content, encoding="utf-8")
    logger.debug(f"Wrote {path}")
