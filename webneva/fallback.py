from __future__ import annotations

from webneva.models import DOCUMENT_KINDS, GenerationRequest, OperationKind
from webneva.render import render_template


def render_degraded_document(req: GenerationRequest) -> str:
    """
    Static page served when no provider produced a usable document.
    Improve/transform echo the caller's document; generate echoes the prompt.
    """
    if req.kind in DOCUMENT_KINDS:
        verb = "improve" if req.kind == OperationKind.IMPROVE else "transform"
        return render_template(
            "degraded_improve.html",
            verb=verb,
            document=req.existing_document or "No code available",
            instruction=req.prompt_text if (req.prompt_text or "").strip() else "",
        )
    return render_template(
        "degraded_generate.html",
        prompt=req.prompt_text if (req.prompt_text or "").strip() else "your description",
    )
