"""Schemas for edit proposals returned by the AI edit generator."""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from app.constants import ResponseType
from app.schemas.app_state import Plan


class Change(BaseModel):
    """A single file operation."""
    filePath: str = Field(..., min_length=1)
    content: Optional[str] = None
    action: Literal["create", "update", "delete"]


class Modification(BaseModel):
    """A set of file changes plus the rendered prototype."""
    projectName: Optional[str] = None
    reason: str
    changes: List[Change] = Field(default_factory=list)
    previewHtml: Optional[str] = None
    standaloneHtml: Optional[str] = None


class EditProposal(BaseModel):
    """Structured answer of the edit generator: a chat reply, a plan or a modification."""
    responseType: Literal["CHAT", "MODIFY_CODE", "PROJECT_PLAN"]
    message: Optional[str] = None
    modification: Optional[Modification] = None
    plan: Optional[Plan] = None

    @model_validator(mode="after")
    def check_payload(self) -> "EditProposal":
        required = {
            ResponseType.CHAT: self.message,
            ResponseType.MODIFY_CODE: self.modification,
            ResponseType.PROJECT_PLAN: self.plan,
        }[self.responseType]
        if required is None:
            raise ValueError(f"{self.responseType} response is missing its payload")
        return self
