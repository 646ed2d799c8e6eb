from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from webneva.errors import AllProvidersExhausted, ProviderError, ProviderResponseInvalid
from webneva.fallback import render_degraded_document
from webneva.models import GenerationRequest, GenerationResult, TextRequest
from webneva.providers import OpenAIChatAdapter, ProviderAdapter
from webneva.validators import check_document

log = logging.getLogger(__name__)

PRIMARY = "primary"
SECONDARY = "secondary"
DEGRADED = "degraded"


def _attempt(adapter: ProviderAdapter, req: GenerationRequest) -> GenerationResult:
    """One call to one provider; raises ProviderError on anything unusable."""
    payload = adapter.build_request(req)
    raw = adapter.invoke(payload)
    candidate = adapter.extract_candidate(raw)
    verdict = check_document(candidate)
    if not verdict.ok:
        raise ProviderResponseInvalid(adapter.name, verdict.reason)
    files = adapter.extract_files(raw) or None
    return GenerationResult(document=candidate, provider="", files=files)


def _try_providers(
    req: GenerationRequest,
    attempts: List[Tuple[str, Optional[ProviderAdapter]]],
) -> GenerationResult:
    failures: List[ProviderError] = []
    for tag, adapter in attempts:
        if adapter is None:
            continue
        log.info("generate kind=%s trying %s provider=%s", req.kind.value, tag, adapter.name)
        try:
            result = _attempt(adapter, req)
        except ProviderError as exc:
            log.warning("generate kind=%s %s provider=%s failed: %s", req.kind.value, tag, adapter.name, exc)
            failures.append(exc)
            continue
        log.info("generate kind=%s served by %s provider=%s", req.kind.value, tag, adapter.name)
        return result.model_copy(update={"provider": tag})
    raise AllProvidersExhausted(failures)


def generate_document(
    req: GenerationRequest,
    primary: Optional[ProviderAdapter],
    secondary: Optional[ProviderAdapter],
) -> GenerationResult:
    """
    Produce a usable document for generate/improve/transform.

    Providers are tried strictly in order (primary, then secondary), one call
    each, stopping at the first validated candidate. If neither yields one, a
    static degraded page is returned instead of an error.
    """
    try:
        return _try_providers(req, [(PRIMARY, primary), (SECONDARY, secondary)])
    except AllProvidersExhausted as exc:
        log.warning(
            "generate kind=%s serving degraded document prompt=%r: %s",
            req.kind.value,
            (req.prompt_text or "")[:100],
            exc,
        )
    return GenerationResult(document=render_degraded_document(req), provider=DEGRADED)


def answer_text(req: TextRequest, provider: OpenAIChatAdapter) -> str:
    """Explain/refine: a single call, no validation and no fallback."""
    log.info("assist kind=%s provider=%s", req.kind.value, provider.name)
    return provider.reply(req)
