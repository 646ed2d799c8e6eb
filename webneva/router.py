from __future__ import annotations

import logging
from typing import FrozenSet, Optional

from webneva import orchestrator, providers
from webneva.errors import InvalidOperation, MissingField, NotConfigured
from webneva.models import (
    AssistBody,
    GenerateBody,
    GenerationRequest,
    GenerationResult,
    GENERATION_KINDS,
    OperationKind,
    TEXT_KINDS,
    TextRequest,
)

log = logging.getLogger(__name__)


def _blank(value: Optional[str]) -> bool:
    return not isinstance(value, str) or not value.strip()


def parse_kind(raw: Optional[str], allowed: FrozenSet[OperationKind]) -> OperationKind:
    if _blank(raw):
        raise InvalidOperation("operationKind is required")
    try:
        kind = OperationKind(raw.strip().lower())
    except ValueError:
        raise InvalidOperation(f"unknown operationKind '{raw}'") from None
    if kind not in allowed:
        names = ", ".join(sorted(k.value for k in allowed))
        raise InvalidOperation(f"operationKind '{kind.value}' is not served here; allowed: {names}")
    return kind


def parse_generation_request(body: GenerateBody) -> GenerationRequest:
    kind = parse_kind(body.operation_kind, GENERATION_KINDS)
    if kind == OperationKind.GENERATE and _blank(body.prompt_text):
        raise MissingField(
            "promptText",
            "promptText is required for generate: describe what you want to build",
        )
    if kind in (OperationKind.IMPROVE, OperationKind.TRANSFORM) and _blank(body.existing_document):
        raise MissingField(
            "existingDocument",
            f"existingDocument is required for {kind.value}: provide the HTML to work on",
        )
    return GenerationRequest(
        kind=kind,
        prompt_text=body.prompt_text or "",
        existing_document=body.existing_document or "",
        options=body.options or {},
    )


def parse_text_request(body: AssistBody) -> TextRequest:
    kind = parse_kind(body.operation_kind, TEXT_KINDS)
    text = body.text
    # refine clients may send the brief as briefText
    if kind == OperationKind.REFINE and _blank(text):
        text = body.brief_text
    if _blank(text):
        field = "briefText" if kind == OperationKind.REFINE else "text"
        raise MissingField(field, f"{field} is required for {kind.value}")
    return TextRequest(kind=kind, text=text)


def handle_generate(body: GenerateBody) -> GenerationResult:
    req = parse_generation_request(body)
    primary, secondary = providers.generation_providers()
    if primary is None and secondary is None:
        log.error("generate rejected: no provider configured")
        raise NotConfigured("configure DEEPSITE_API_URL/DEEPSITE_API_KEY or OPENAI_API_KEY")
    log.info(
        "generate kind=%s prompt=%r primary=%s secondary=%s",
        req.kind.value,
        req.prompt_text[:100],
        primary is not None,
        secondary is not None,
    )
    return orchestrator.generate_document(req, primary, secondary)


def handle_assist(body: AssistBody) -> str:
    req = parse_text_request(body)
    return orchestrator.answer_text(req, providers.text_provider())
