from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional, Tuple

import requests
from requests.exceptions import RequestException, Timeout

from webneva.errors import (
    NotConfigured,
    ProviderResponseInvalid,
    ProviderTimeout,
    ProviderTransportError,
)
from webneva.llm_parsing import chat_content, html_from_text, site_candidate
from webneva.llm_prompts import build_chat_messages, build_generation_prompt, build_text_messages
from webneva.models import DOCUMENT_KINDS, GenerationRequest, TextRequest

log = logging.getLogger(__name__)

# Primary: DeepSite site generator
DEEPSITE_API_URL = os.getenv("DEEPSITE_API_URL", "").strip()
DEEPSITE_API_KEY = os.getenv("DEEPSITE_API_KEY", "").strip()

# Secondary: OpenAI chat completions
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini").strip()
OPENAI_ENDPOINT = os.getenv("OPENAI_ENDPOINT", "https://api.openai.com/v1/chat/completions").strip()

DEFAULT_TIMEOUT_SECS = 60.0


def _positive_timeout(raw: Any, default: float = DEFAULT_TIMEOUT_SECS) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    # requests rejects zero and negative timeouts
    return value if value > 0 else default


LLM_TIMEOUT_SECS = _positive_timeout(os.getenv("LLM_TIMEOUT_SECS", "60"))
try:
    LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "4000"))
except Exception:
    LLM_MAX_TOKENS = 4000
try:
    TEMPERATURE = float(os.getenv("TEMPERATURE", "0.3"))
except Exception:
    TEMPERATURE = 0.3
try:
    EXPLAIN_TEMPERATURE = float(os.getenv("EXPLAIN_TEMPERATURE", "0.2"))
except Exception:
    EXPLAIN_TEMPERATURE = 0.2

DEEPSITE_SETTINGS: Dict[str, Any] = {
    "quality": "high",
    "framework": "html_tailwind",
    "responsiveness": True,
    "accessibility": True,
}


class ProviderAdapter:
    """One upstream LLM service.

    The orchestrator only ever calls build_request -> invoke -> extract_candidate,
    so a new provider is one subclass.
    """

    name = "provider"

    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout = _positive_timeout(timeout, LLM_TIMEOUT_SECS)

    def build_request(self, req: GenerationRequest) -> Dict[str, Any]:
        raise NotImplementedError

    def invoke(self, payload: Dict[str, Any]) -> Any:
        raise NotImplementedError

    def extract_candidate(self, raw: Any) -> Optional[str]:
        raise NotImplementedError

    def extract_files(self, raw: Any) -> Optional[List[Dict[str, Any]]]:
        return None

    def _post_json(self, url: str, headers: Dict[str, str], body: Dict[str, Any]) -> Any:
        """POST a JSON body and decode the JSON reply.

        `self.timeout` bounds the connect and each socket read, not the whole
        call: a server trickling bytes can keep it open longer.
        """
        try:
            resp = requests.post(url, headers=headers, json=body, timeout=self.timeout)
        except Timeout as exc:
            raise ProviderTimeout(self.name, f"no response within {self.timeout:g}s") from exc
        except RequestException as exc:
            raise ProviderTransportError(self.name, f"request error: {exc!r}") from exc

        if not 200 <= resp.status_code < 300:
            try:
                msg = resp.text[:400]
            except Exception:
                msg = ""
            raise ProviderTransportError(self.name, f"HTTP {resp.status_code} {msg}".strip())

        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderResponseInvalid(self.name, "non-JSON HTTP body") from exc


class DeepSiteAdapter(ProviderAdapter):
    name = "deepsite"

    def __init__(self, url: str, api_key: str, timeout: Optional[float] = None) -> None:
        super().__init__(timeout)
        self.url = url
        self.api_key = api_key

    def build_request(self, req: GenerationRequest) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "action": req.kind.value,
            "prompt": build_generation_prompt(req),
            "settings": dict(DEEPSITE_SETTINGS),
        }
        if req.kind in DOCUMENT_KINDS:
            payload["html"] = req.existing_document
        if req.options:
            payload["options"] = dict(req.options)
        return payload

    def invoke(self, payload: Dict[str, Any]) -> Any:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        return self._post_json(self.url, headers, payload)

    def extract_candidate(self, raw: Any) -> Optional[str]:
        document, _ = site_candidate(raw)
        return document

    def extract_files(self, raw: Any) -> Optional[List[Dict[str, Any]]]:
        _, files = site_candidate(raw)
        return files


class OpenAIChatAdapter(ProviderAdapter):
    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        super().__init__(timeout)
        self.api_key = api_key
        self.model = model or OPENAI_MODEL
        self.endpoint = endpoint or OPENAI_ENDPOINT

    def _chat_body(self, messages: List[Dict[str, Any]], temperature: float) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": LLM_MAX_TOKENS,
        }

    def build_request(self, req: GenerationRequest) -> Dict[str, Any]:
        return self._chat_body(build_chat_messages(req), TEMPERATURE)

    def build_text_request(self, req: TextRequest) -> Dict[str, Any]:
        return self._chat_body(build_text_messages(req), EXPLAIN_TEMPERATURE)

    def invoke(self, payload: Dict[str, Any]) -> Any:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        return self._post_json(self.endpoint, headers, payload)

    def extract_candidate(self, raw: Any) -> Optional[str]:
        text = chat_content(raw)
        if text is None:
            return None
        return html_from_text(text)

    def extract_files(self, raw: Any) -> Optional[List[Dict[str, Any]]]:
        document = self.extract_candidate(raw)
        if not document:
            return None
        return [{"name": "index.html", "content": document, "type": "html"}]

    def reply(self, req: TextRequest) -> str:
        """Prose answer for explain/refine; failures propagate to the caller."""
        raw = self.invoke(self.build_text_request(req))
        text = chat_content(raw)
        if not text:
            raise ProviderResponseInvalid(self.name, "empty response text")
        return text


def primary_configured() -> bool:
    return bool(DEEPSITE_API_URL and DEEPSITE_API_KEY)


def secondary_configured() -> bool:
    return bool(OPENAI_API_KEY)


def status() -> Dict[str, Any]:
    order = [tag for tag, ok in (("primary", primary_configured()), ("secondary", secondary_configured())) if ok]
    return {
        "primary": primary_configured(),
        "secondary": secondary_configured(),
        "order": order,
        "model": OPENAI_MODEL if secondary_configured() else None,
        "timeout_secs": LLM_TIMEOUT_SECS,
    }


def generation_providers() -> Tuple[Optional[ProviderAdapter], Optional[ProviderAdapter]]:
    """(primary, secondary) adapters for what is configured right now."""
    primary = DeepSiteAdapter(DEEPSITE_API_URL, DEEPSITE_API_KEY) if primary_configured() else None
    secondary = OpenAIChatAdapter(OPENAI_API_KEY) if secondary_configured() else None
    return primary, secondary


def text_provider() -> OpenAIChatAdapter:
    if not secondary_configured():
        log.error("text provider requested but OPENAI_API_KEY is not set")
        raise NotConfigured("explain and refine need OPENAI_API_KEY")
    return OpenAIChatAdapter(OPENAI_API_KEY)
