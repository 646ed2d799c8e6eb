from __future__ import annotations

import re
from typing import Any, NamedTuple, Optional, Tuple

# Tag name must end at whitespace, '>' or '/' so <header> never counts as <head>
_HTML_TAG_RE = re.compile(r"<html(?=[\s>/])", re.IGNORECASE)
_HEAD_TAG_RE = re.compile(r"<head(?=[\s>/])", re.IGNORECASE)
_BODY_TAG_RE = re.compile(r"<body(?=[\s>/])", re.IGNORECASE)

_REQUIRED_TAGS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    ("html", _HTML_TAG_RE),
    ("head", _HEAD_TAG_RE),
    ("body", _BODY_TAG_RE),
)


class Verdict(NamedTuple):
    ok: bool
    reason: str


def check_document(candidate: Any) -> Verdict:
    """
    Decide whether `candidate` can be returned as a complete page.

    A usable document is a non-empty string with opening <html>, <head> and
    <body> tags (any case, any attributes). Never raises.
    """
    if not isinstance(candidate, str):
        return Verdict(False, "candidate is not a string")
    if not candidate.strip():
        return Verdict(False, "candidate is empty")
    missing = [name for name, pattern in _REQUIRED_TAGS if not pattern.search(candidate)]
    if missing:
        tags = ", ".join(f"<{m}>" for m in missing)
        return Verdict(False, f"missing required tag(s): {tags}")
    return Verdict(True, "ok")


def is_valid_document(candidate: Any) -> bool:
    return check_document(candidate).ok


def select_document_from_files(files: Any) -> Optional[Tuple[int, str]]:
    """
    Return (index, content) of the first file entry whose content validates on
    its own, or None. Entries are never combined.
    """
    if not isinstance(files, list):
        return None
    for idx, entry in enumerate(files):
        if not isinstance(entry, dict):
            continue
        content = entry.get("content")
        if is_valid_document(content):
            return idx, content
    return None


def check_files(files: Any) -> Verdict:
    if not isinstance(files, (list, tuple)):
        return Verdict(False, "files is not a list")
    files_list = list(files)
    if not files_list:
        return Verdict(False, "no file candidates")
    picked = select_document_from_files(files_list)
    if picked is None:
        return Verdict(False, "no file entry is a complete document")
    idx, _ = picked
    name = files_list[idx].get("name") or f"files[{idx}]"
    return Verdict(True, f"ok ({name})")
