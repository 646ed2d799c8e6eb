from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

# Ampersand must go first so existing entities are not double-escaped
_ENTITY_ORDER = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#039;"),
)


def escape_html(text: Any) -> str:
    s = "" if text is None else str(text)
    for raw, entity in _ENTITY_ORDER:
        s = s.replace(raw, entity)
    return s


def _escape_text_filter(value: Any) -> Markup:
    return Markup(escape_html(value))


# Jinja environment that looks in the package's templates/ directory
_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
    enable_async=False,
    keep_trailing_newline=True,
)
_env.filters["escape_text"] = _escape_text_filter


def render_template(name: str, **context: Any) -> str:
    return _env.get_template(name).render(**context)
