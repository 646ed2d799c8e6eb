from __future__ import annotations

from typing import Any, Dict, List, Optional


class WebnevaError(Exception):
    """Base error; the API layer renders it as {"error": code, "details": message}."""

    code = "InternalError"
    status_code = 500

    def __init__(self, message: str = "", *, details: Optional[str] = None) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code
        self.details = details

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.code, "details": self.details or self.message}
        return payload


class InvalidOperation(WebnevaError):
    code = "InvalidOperation"
    status_code = 400


class MissingField(WebnevaError):
    code = "MissingField"
    status_code = 400

    def __init__(self, field: str, message: str = "") -> None:
        super().__init__(message or f"required field '{field}' is missing or empty")
        self.field = field


class NotConfigured(WebnevaError):
    code = "NotConfigured"
    status_code = 503


class ProviderError(WebnevaError):
    """Raised by provider adapters; `provider` names the upstream that failed."""

    code = "ProviderError"
    status_code = 502

    def __init__(self, provider: str, message: str = "") -> None:
        super().__init__(f"{provider}: {message}" if message else provider)
        self.provider = provider


class ProviderTransportError(ProviderError):
    code = "ProviderTransportError"


class ProviderTimeout(ProviderTransportError):
    code = "ProviderTimeout"
    status_code = 504


class ProviderResponseInvalid(ProviderError):
    code = "ProviderResponseInvalid"


class AllProvidersExhausted(WebnevaError):
    """Internal only: the orchestrator swaps it for the degraded document."""

    code = "AllProvidersExhausted"

    def __init__(self, failures: List[ProviderError]) -> None:
        summary = "; ".join(str(f) for f in failures) or "no provider attempted"
        super().__init__(f"all providers failed ({summary})")
        self.failures = list(failures)
