"""Schemas for project snapshots and their version history."""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FileStructureEntry(BaseModel):
    """One planned file and what it is for."""
    model_config = ConfigDict(frozen=True)

    path: str
    purpose: str = ""


class Plan(BaseModel):
    """Project plan produced by the planning step."""
    model_config = ConfigDict(frozen=True)

    projectName: str
    description: str = ""
    features: List[str] = Field(default_factory=list)
    fileStructure: List[FileStructureEntry] = Field(default_factory=list)
    techStack: List[str] = Field(default_factory=list)


class Message(BaseModel):
    """One conversation turn."""
    model_config = ConfigDict(frozen=True)

    role: str = Field(..., description="user, model or system")
    content: str
    timestamp: Optional[datetime] = None
    action: Optional[str] = Field(None, description="Client action attached to the message")
    plan: Optional[Plan] = None


class AppState(BaseModel):
    """Point-in-time view of a project's generated files, chat log and plan."""
    model_config = ConfigDict(frozen=True)

    files: Dict[str, str] = Field(default_factory=dict)
    previewHtml: str = ""
    standaloneHtml: str = ""
    chatMessages: List[Message] = Field(default_factory=list)
    hasGeneratedCode: bool = False
    projectName: str
    projectPlan: Optional[Plan] = None


class HistoryDocument(BaseModel):
    """Persisted form of a project's history."""
    versions: List[AppState] = Field(..., min_length=1)
    currentIndex: int = Field(..., ge=0)


class VersionSummary(BaseModel):
    """Entry in the version history panel."""
    index: int
    projectName: str
    fileCount: int
    messageCount: int
    isCurrent: bool
