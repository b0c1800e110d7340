"""Pydantic schemas for request/response validation."""
from app.schemas.app_state import AppState, HistoryDocument, Message, Plan, VersionSummary
from app.schemas.credits import CreditInfo, CreditsResponse, ConsumeResponse
from app.schemas.edits import Change, EditProposal, Modification
from app.schemas.project import (
    NavigationResponse,
    ProjectCreate,
    ProjectResponse,
    ProjectSummary,
    ProjectUpdate,
    WorkspaceResponse,
)

__all__ = [
    "AppState",
    "HistoryDocument",
    "Message",
    "Plan",
    "VersionSummary",
    "CreditInfo",
    "CreditsResponse",
    "ConsumeResponse",
    "Change",
    "EditProposal",
    "Modification",
    "NavigationResponse",
    "ProjectCreate",
    "ProjectResponse",
    "ProjectSummary",
    "ProjectUpdate",
    "WorkspaceResponse",
]
