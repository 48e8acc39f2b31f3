"""
Document persistence for the article store

Reads the JSON document, validates its envelope (top-level object with an
integer "version") and writes it back with a single atomic replace.
"""

import json
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .errors import MalformedDocument
from .schema import RECORDS_KEY

logger = logging.getLogger(__name__)

VERSION_KEY = "version"


@dataclass
class Document:
    """
    A persisted document.

    `payload` holds every top-level key as read from storage; `version` and
    `records` are the parts migrations touch. Keys other than those two are
    written back untouched.
    """
    version: int
    records: Any
    payload: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls,
                  text: Union[str, bytes],
                  location: Optional[Path] = None) -> 'Document':
        """
        Parse a document from JSON text.

        Raises:
            MalformedDocument: If the text is not JSON, the top level is not an
                object, or "version" is not a non-negative integer
        """
        try:
            if isinstance(text, bytes):
                text = text.decode("utf-8")
            data = json.loads(text)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedDocument(f"Document is not valid JSON: {e}", location) from e
        except RecursionError as e:
            raise MalformedDocument(f"Document is nested too deeply: {e}", location) from e

        if not isinstance(data, dict):
            raise MalformedDocument(
                f"Document must be a JSON object, got {type(data).__name__}", location
            )

        version = data.get(VERSION_KEY)
        if not isinstance(version, int) or isinstance(version, bool):
            raise MalformedDocument(
                f"Document '{VERSION_KEY}' must be an integer, got {version!r}", location
            )
        if version < 0:
            raise MalformedDocument(
                f"Document '{VERSION_KEY}' must be >= 0, got {version}", location
            )

        return cls(version=version, records=data.get(RECORDS_KEY), payload=data)

    def to_dict(self) -> Dict[str, Any]:
        """Return the full payload with the current version and records."""
        data = dict(self.payload)
        data[VERSION_KEY] = self.version
        data[RECORDS_KEY] = self.records
        return data

    def to_json(self) -> str:
        """Serialize compactly, keeping non-ASCII text as is."""
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))


def read_document(path: Union[str, Path]) -> Optional[Document]:
    """
    Read and parse the document at `path`.

    Returns:
        The document, or None if no file exists at `path`

    Raises:
        MalformedDocument: If the file content is not a valid document
    """
    path = Path(path)
    try:
        content = path.read_bytes()
    except FileNotFoundError:
        return None
    return Document.from_json(content, path)


def atomic_write_bytes(path: Union[str, Path], content: bytes) -> None:
    """
    Replace the content of `path` with `content` in one step.

    Writes to a temporary file in the same directory and renames it over the
    target, so readers see either the old or the new content. File mode of an
    existing target is kept.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp = tempfile.NamedTemporaryFile(
        mode='wb',
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False
    )
    tmp_path = Path(tmp.name)

    try:
        with tmp:
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
        if path.exists():
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def atomic_write_text(path: Union[str, Path], text: str) -> None:
    """Atomically replace `path` with `text` encoded as UTF-8, newlines untranslated."""
    atomic_write_bytes(path, text.encode("utf-8"))


def write_document(path: Union[str, Path], document: Document) -> None:
    """Serialize `document` and atomically replace the file at `path`."""
    text = document.to_json()
    atomic_write_text(path, text)
    logger.debug("Wrote document v%d to %s (%d chars)", document.version, path, len(text))
