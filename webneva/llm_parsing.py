from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple

from webneva.validators import check_document, select_document_from_files

_FENCED_RE = re.compile(r"```[ \t]*([A-Za-z0-9_+-]*)[ \t]*\n?([\s\S]*?)```")
_STRAY_FENCE_RE = re.compile(r"```[A-Za-z0-9_+-]*")
_DOC_START_RE = re.compile(r"<!doctype\s+html|<html(?=[\s>/])", re.IGNORECASE)
_DOC_END_RE = re.compile(r"</html\s*>", re.IGNORECASE)
_HTML_LANGS = ("html", "htm")


def _pick_fenced_block(text: str) -> Optional[str]:
    """First fenced block that is a full document, else the first html-tagged one."""
    tagged = None
    for m in _FENCED_RE.finditer(text):
        body = m.group(2).strip()
        if not body:
            continue
        if check_document(body).ok:
            return body
        if tagged is None and m.group(1).lower() in _HTML_LANGS:
            tagged = body
    return tagged


def _cut_document(text: str) -> str:
    start = _DOC_START_RE.search(text)
    if not start:
        return text.strip()
    text = text[start.start():]
    end = None
    for end in _DOC_END_RE.finditer(text):
        pass
    if end is not None:
        text = text[: end.end()]
    return text.strip()


def html_from_text(text: Optional[str]) -> str:
    """Pull an HTML document out of a chat reply.

    Strategy:
    - Among fenced blocks, prefer the first one holding a full document, then
      the first tagged ```html/```htm.
    - Otherwise drop stray fences and work on the whole reply.
    - Either way cut from the doctype/<html> to the last </html>, so prose
      before or after the document never ends up in it.
    Returns the trimmed text even when no document markers are found; the
    validator decides whether it is usable.
    """
    t = (text or "").strip()
    if not t:
        return ""
    block = _pick_fenced_block(t)
    if block is None:
        block = _STRAY_FENCE_RE.sub("", t)
    return _cut_document(block)


def chat_content(data: Any) -> Optional[str]:
    """choices[0].message.content from an OpenAI-style payload, or None."""
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if not isinstance(content, str):
        return None
    return content.strip() or None


def normalize_files(files: Any) -> List[Dict[str, Any]]:
    """Keep well-formed {name, content, type} entries of a multi-file reply."""
    out: List[Dict[str, Any]] = []
    if not isinstance(files, list):
        return out
    for idx, entry in enumerate(files):
        if not isinstance(entry, dict):
            continue
        content = entry.get("content")
        if not isinstance(content, str):
            continue
        name = entry.get("name") if isinstance(entry.get("name"), str) else f"file-{idx + 1}"
        ftype = entry.get("type")
        if not isinstance(ftype, str) or not ftype:
            ftype = name.rsplit(".", 1)[-1].lower() if "." in name else "html"
        out.append({"name": name, "content": content, "type": ftype})
    return out


def site_candidate(data: Any) -> Tuple[Optional[str], Optional[List[Dict[str, Any]]]]:
    """Split a site-generator reply into (document, files).

    A `files` list is authoritative when present: the document is then the
    first entry that validates on its own, and `html` is ignored.
    """
    if not isinstance(data, dict):
        return None, None
    if isinstance(data.get("files"), list):
        files = normalize_files(data["files"])
        picked = select_document_from_files(files)
        if picked is None:
            return None, files
        return picked[1], files
    html = data.get("html")
    if isinstance(html, str):
        return html, None
    return None, None
