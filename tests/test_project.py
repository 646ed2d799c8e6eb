import copy
import json
from datetime import datetime, timezone

from webneva import project as proj


def test_empty_project_shape_is_valid():
    p = proj.create_empty_project()
    assert p["projectName"] == proj.DEFAULT_PROJECT_NAME
    assert [pg["path"] for pg in p["pages"]] == ["index.html"]
    assert p["history"] == []
    assert "<html" in p["pages"][0]["html"]
    assert proj.validation_errors(p) == []


def test_add_page_slugifies_and_leaves_input_untouched():
    p = proj.create_empty_project()
    before = copy.deepcopy(p)
    p2 = proj.add_page(p, "Our  Services")
    assert p == before
    page = proj.get_page(p2, "our-services.html")
    assert page is not None
    assert page["name"] == "Our  Services"
    assert 'href="index.html"' in page["html"]


def test_add_page_escapes_name_in_markup():
    p2 = proj.add_page(proj.create_empty_project(), "<b>Deals</b>")
    html = p2["pages"][-1]["html"]
    assert "<b>Deals</b>" not in html
    assert "&lt;b&gt;Deals&lt;/b&gt;" in html


def test_upsert_replaces_by_path_or_appends():
    p = proj.create_empty_project()
    replaced = proj.upsert_page(p, {"name": "Home", "path": "index.html", "html": "<p>new</p>", "css": "", "js": ""})
    assert len(replaced["pages"]) == 1
    assert replaced["pages"][0]["html"] == "<p>new</p>"
    assert p["pages"][0]["html"] != "<p>new</p>"
    appended = proj.upsert_page(p, {"name": "FAQ", "path": "faq.html", "html": "", "css": "", "js": ""})
    assert [pg["path"] for pg in appended["pages"]] == ["index.html", "faq.html"]


def test_push_history_prepends_snapshot():
    t1 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    t2 = datetime(2024, 5, 2, 12, 0, tzinfo=timezone.utc)
    p = proj.push_history(proj.create_empty_project(), "first", now=t1)
    p = proj.push_history(p, "second", now=t2)
    assert [h["note"] for h in p["history"]] == ["second", "first"]
    assert p["history"][0]["timestamp"] == t2.isoformat()
    assert set(p["history"][0]["pages"][0]) == {"path", "html", "css", "js"}


def test_apply_generation_updates_page_and_history():
    p = proj.create_empty_project()
    result = {
        "document": "<html><head></head><body>AI</body></html>",
        "provider": "primary",
        "files": [
            {"name": "index.html", "content": "<html><head></head><body>AI</body></html>", "type": "html"},
            {"name": "style.css", "content": "body{color:red}", "type": "css"},
        ],
    }
    p2 = proj.apply_generation(p, "index.html", result, note="Generated site")
    page = proj.get_page(p2, "index.html")
    assert page["html"] == result["document"]
    assert page["css"] == "body{color:red}"
    assert p2["history"][0]["note"] == "Generated site"
    assert p["history"] == []


def test_dump_and_load_round_trip():
    p = proj.add_page(proj.create_empty_project(), "About")
    raw = proj.dump_project(p)
    assert proj.load_project(raw) == p


def test_load_rejects_missing_bad_json_and_invalid_shape():
    assert proj.load_project(None) is None
    assert proj.load_project("{not json") is None
    assert proj.load_project(json.dumps({"projectName": "x", "pages": []})) is None
    assert proj.load_project(json.dumps({"pages": [{"path": "a.html"}]})) is None


def test_load_fills_missing_history():
    raw = json.dumps({"projectName": "x", "pages": [{"name": "Home", "path": "index.html", "html": ""}]})
    loaded = proj.load_project(raw)
    assert loaded["history"] == []
