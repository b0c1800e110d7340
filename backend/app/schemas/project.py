"""Schemas for project lifecycle and history navigation."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.constants import DEFAULT_PROJECT_NAME
from app.schemas.app_state import AppState, HistoryDocument
from app.schemas.credits import CreditsResponse


class ProjectCreate(BaseModel):
    """Request schema for POST /api/projects."""
    model_config = ConfigDict(str_strip_whitespace=True)

    projectName: str = Field(DEFAULT_PROJECT_NAME, min_length=1, max_length=255)


class ProjectUpdate(BaseModel):
    """Request schema for PUT /api/projects/{id}; replaces name and history wholesale."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str
    projectName: str = Field(..., min_length=1, max_length=255)
    history: HistoryDocument
    revision: Optional[int] = Field(None, description="Stored revision the client based its edit on")


class ProjectResponse(BaseModel):
    """Full project, including its history document."""
    id: str
    ownerId: str
    projectName: str
    history: HistoryDocument
    revision: int
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class ProjectSummary(BaseModel):
    """List entry: the current version's derived fields, never the full history."""
    id: str
    projectName: str
    updatedAt: Optional[datetime] = None
    currentIndex: int
    versionCount: int
    fileCount: int
    messageCount: int
    hasGeneratedCode: bool


class WorkspaceResponse(BaseModel):
    """All projects of a user, most recently updated first."""
    projects: List[ProjectSummary]
    activeProjectId: Optional[str] = None


class NavigationResponse(BaseModel):
    """Result of commit/undo/redo/restore."""
    state: AppState
    currentIndex: int
    versionCount: int
    canUndo: bool
    canRedo: bool
    moved: bool = True
    revision: int


class RenameRequest(BaseModel):
    """Request schema for POST /api/projects/{id}/rename."""
    model_config = ConfigDict(str_strip_whitespace=True)

    projectName: str = Field(..., min_length=1, max_length=255)


class TurnRequest(BaseModel):
    """Request schema for POST /api/projects/{id}/turns."""
    message: str = Field(..., min_length=1)


class TurnResponse(NavigationResponse):
    """Result of an AI turn plus the caller's remaining quota."""
    responseType: Optional[str] = None
    credits: CreditsResponse
