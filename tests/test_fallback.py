import html

import pytest

from webneva.fallback import render_degraded_document
from webneva.models import GenerationRequest, OperationKind
from webneva.render import escape_html
from webneva.validators import check_document


@pytest.mark.parametrize(
    "raw",
    [
        "&<>\"'",
        "Tom & Jerry's <b>\"bakery\"</b>",
        "&amp; already an entity",
        "<script>alert('x')</script>",
        "plain text",
        "",
    ],
)
def test_escape_round_trips_through_html_unescape(raw):
    escaped = escape_html(raw)
    for ch in "<>\"'":
        assert ch not in escaped
    assert html.unescape(escaped) == raw


def test_escape_replaces_ampersand_first():
    assert escape_html("&lt;") == "&amp;lt;"
    assert escape_html("<a href=\"x\">it's</a>") == "&lt;a href=&quot;x&quot;&gt;it&#039;s&lt;/a&gt;"
    assert escape_html(None) == ""


def test_degraded_generate_echoes_escaped_prompt():
    prompt = "Bakery <landing> page & \"fresh\" bread"
    req = GenerationRequest(kind=OperationKind.GENERATE, prompt_text=prompt)
    out = render_degraded_document(req)
    assert check_document(out).ok
    assert escape_html(prompt) in out
    assert "<landing>" not in out
    assert "Automatic generation failed" in out


def test_degraded_improve_echoes_original_document_in_code_block():
    original = "<!doctype html>\n<html><head></head><body>\n  <p class='x'>Hi & bye</p>\n</body></html>"
    req = GenerationRequest(kind=OperationKind.IMPROVE, existing_document=original, prompt_text="make it blue")
    out = render_degraded_document(req)
    assert check_document(out).ok
    assert f"<code>{escape_html(original)}</code>" in out
    assert "make it blue" in out
    assert "could not improve" in out


def test_degraded_transform_uses_document_template():
    req = GenerationRequest(kind=OperationKind.TRANSFORM, existing_document="<div>old</div>")
    out = render_degraded_document(req)
    assert "&lt;div&gt;old&lt;/div&gt;" in out
    assert "could not transform" in out
    assert "Your instruction" not in out


def test_degraded_output_is_deterministic():
    req = GenerationRequest(kind=OperationKind.GENERATE, prompt_text="same")
    assert render_degraded_document(req) == render_degraded_document(req)
