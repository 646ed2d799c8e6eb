from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class OperationKind(str, Enum):
    GENERATE = "generate"
    IMPROVE = "improve"
    EXPLAIN = "explain"
    REFINE = "refine"
    TRANSFORM = "transform"


GENERATION_KINDS = frozenset({OperationKind.GENERATE, OperationKind.IMPROVE, OperationKind.TRANSFORM})
TEXT_KINDS = frozenset({OperationKind.EXPLAIN, OperationKind.REFINE})
DOCUMENT_KINDS = frozenset({OperationKind.IMPROVE, OperationKind.TRANSFORM})


# Wire bodies: every field optional so the router can report MissingField itself
class GenerateBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    operation_kind: Optional[str] = Field(default=None, alias="operationKind")
    prompt_text: Optional[str] = Field(default=None, alias="promptText")
    existing_document: Optional[str] = Field(default=None, alias="existingDocument")
    options: Optional[Dict[str, Any]] = None


class AssistBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    operation_kind: Optional[str] = Field(default=None, alias="operationKind")
    text: Optional[str] = None
    brief_text: Optional[str] = Field(default=None, alias="briefText")


class ValidateBody(BaseModel):
    document: Optional[str] = None
    files: Optional[List[Dict[str, Any]]] = None


class GenerationRequest(BaseModel):
    """Validated generate/improve/transform request."""

    model_config = ConfigDict(frozen=True)

    kind: OperationKind
    prompt_text: str = ""
    existing_document: str = ""
    options: Dict[str, Any] = Field(default_factory=dict)


class TextRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: OperationKind
    text: str


class GenerationResult(BaseModel):
    document: str
    provider: str
    files: Optional[List[Dict[str, Any]]] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
