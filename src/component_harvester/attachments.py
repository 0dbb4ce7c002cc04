"""Content-addressed attachment of license-like files.

Tokens depend only on file bytes, so the same LICENSE text found in two
components (or two folders of one component) shares a single token and the
content can be stored once downstream.
"""

import hashlib
from pathlib import Path
from typing import Iterable, Optional, Union

from .documents import Attachment, Document
from .exceptions import HarvesterError
from .logging_config import get_logger

logger = get_logger(__name__)

INTERESTING_NAMES = (
    "license",
    "license-mit",
    "license-apache",
    "unlicense",
    "copying",
    "notice",
    "notices",
    "contributors",
    "patents",
)
INTERESTING_SUFFIXES = ("", ".md", ".txt", ".html")

_INTERESTING_BASENAMES = frozenset(
    name + suffix for name in INTERESTING_NAMES for suffix in INTERESTING_SUFFIXES
)


def compute_token(content: Union[bytes, str]) -> str:
    """SHA-256 hex digest of ``content`` (str is UTF-8 encoded first)."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def attach_files(document: Document, files: Optional[Iterable[str]], location: Union[str, Path]) -> None:
    """Attach ``files`` (relative to ``location``) to ``document``.

    Each file gets a public ``{path, token}`` entry and an internal record that
    also holds the text. An empty list leaves the document untouched.
    """
    files = list(files or [])
    if not files:
        return
    if document.attachments is None:
        document.attachments = []
    root = Path(location)
    for file in files:
        full_path = root / file
        try:
            raw = full_path.read_bytes()
        except OSError as e:
            raise HarvesterError(
                f"Cannot read attachment: {full_path}", details={"reason": str(e)}
            )
        token = compute_token(raw)
        attachment = Attachment(path=file, token=token, content=raw.decode("utf-8", errors="replace"))
        document.internal_attachments.append(attachment)
        document.attachments.append(attachment.public())
        logger.debug("Attached %s (%s)", file, token[:12])


def find_interestingly_named_files(location: Union[str, Path], folder: str = "") -> list[str]:
    """Case-insensitive, non-recursive allow-list match under ``location/folder``."""
    search_root = Path(location) / folder
    if not search_root.is_dir():
        return []
    matches = []
    for entry in sorted(search_root.iterdir()):
        if entry.is_file() and entry.name.lower() in _INTERESTING_BASENAMES:
            matches.append(str(Path(folder) / entry.name) if folder else entry.name)
    return matches


def attach_interestingly_named_files(
    document: Document, location: Optional[Union[str, Path]], folder: str = ""
) -> None:
    """Attach every license-like file found directly in ``location/folder``."""
    if location is None:
        return
    files = find_interestingly_named_files(location, folder)
    if not files:
        return
    attach_files(document, files, location)
