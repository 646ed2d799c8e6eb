"""Project document edited by the studio.

Every update function returns a new project and leaves its input untouched;
persisting the result (browser storage, a file) is the caller's job, done
through dump_project/load_project.
"""
from __future__ import annotations

import copy
import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from jsonschema.validators import Draft202012Validator

from webneva.render import render_template

log = logging.getLogger(__name__)

STORAGE_KEY = "webneva_project_v1"
DEFAULT_PROJECT_NAME = "My project"
SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "project_schema.json"

_validator: Optional[Draft202012Validator] = None


def _project_validator() -> Draft202012Validator:
    global _validator
    if _validator is None:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        Draft202012Validator.check_schema(schema)
        _validator = Draft202012Validator(schema)
    return _validator


def slugify(name: str) -> str:
    return re.sub(r"\s+", "-", (name or "").strip().lower())


def _starter_html(title: str, heading: str, lead: str, nav: List[Dict[str, str]], heading_class: str) -> str:
    return render_template(
        "page_starter.html",
        title=title,
        heading=heading,
        lead=lead,
        nav=nav,
        heading_class=heading_class,
    )


def create_empty_project() -> Dict[str, Any]:
    html = _starter_html(
        title="New project",
        heading="Welcome to your new site",
        lead="Edit me in Webneva Studio.",
        nav=[{"path": "about.html", "name": "About"}, {"path": "contact.html", "name": "Contact"}],
        heading_class="text-4xl font-black",
    )
    return {
        "projectName": DEFAULT_PROJECT_NAME,
        "pages": [{"name": "Home", "path": "index.html", "html": html, "css": "", "js": ""}],
        "history": [],
    }


def add_page(project: Dict[str, Any], name: str = "New page") -> Dict[str, Any]:
    path = f"{slugify(name)}.html"
    html = _starter_html(
        title=name,
        heading=name,
        lead="New page generated in Webneva.",
        nav=[{"path": "index.html", "name": "Home"}],
        heading_class="text-3xl font-bold",
    )
    out = copy.deepcopy(project)
    out.setdefault("pages", []).append({"name": name, "path": path, "html": html, "css": "", "js": ""})
    return out


def get_page(project: Dict[str, Any], path: str) -> Optional[Dict[str, Any]]:
    for page in project.get("pages", []):
        if page.get("path") == path:
            return page
    return None


def upsert_page(project: Dict[str, Any], page: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(project)
    pages = out.setdefault("pages", [])
    new_page = copy.deepcopy(page)
    for idx, existing in enumerate(pages):
        if existing.get("path") == new_page.get("path"):
            pages[idx] = new_page
            break
    else:
        pages.append(new_page)
    return out


def push_history(project: Dict[str, Any], note: str = "", now: Optional[datetime] = None) -> Dict[str, Any]:
    """Prepend a snapshot of every page's code; newest entry first."""
    ts = (now or datetime.now(timezone.utc)).isoformat()
    entry = {
        "timestamp": ts,
        "note": note,
        "pages": [
            {"path": p.get("path"), "html": p.get("html", ""), "css": p.get("css", ""), "js": p.get("js", "")}
            for p in project.get("pages", [])
        ],
    }
    out = copy.deepcopy(project)
    out["history"] = [entry] + list(out.get("history") or [])
    return out


def apply_generation(
    project: Dict[str, Any],
    path: str,
    result: Dict[str, Any],
    note: str = "",
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Write a /api/generate payload into page `path` and record it in history.

    Stylesheet and script entries of a multi-file result replace the page's
    css/js; the document always replaces its html.
    """
    page = get_page(project, path)
    if page is None:
        page = {"name": path.rsplit(".", 1)[0] or path, "path": path, "css": "", "js": ""}
    page = dict(page)
    page["html"] = result["document"]
    for entry in result.get("files") or []:
        ftype = (entry.get("type") or "").lower()
        if ftype in ("css", "js") and isinstance(entry.get("content"), str):
            page[ftype] = entry["content"]
    updated = upsert_page(project, page)
    return push_history(updated, note or f"{result.get('provider', 'ai')}: {path}", now=now)


def validation_errors(project: Any) -> List[Dict[str, str]]:
    errors: List[Dict[str, str]] = []
    for err in _project_validator().iter_errors(project):
        loc = ".".join(str(p) for p in err.path) or "(root)"
        errors.append({"path": loc, "message": str(err.message)})
    return errors


def dump_project(project: Dict[str, Any]) -> str:
    errors = validation_errors(project)
    if errors:
        raise ValueError(f"project failed validation: {errors[0]['path']}: {errors[0]['message']}")
    return json.dumps(project, ensure_ascii=False, separators=(",", ":"))


def load_project(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    """Parse stored project JSON; None when missing, unreadable or invalid."""
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        log.warning("project: stored data is not JSON")
        return None
    errors = validation_errors(data)
    if errors:
        log.warning("project: stored data failed validation (%d errors) first=%s", len(errors), errors[0])
        return None
    data.setdefault("history", [])
    return data
