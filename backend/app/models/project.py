"""Project model for AI-built web apps."""
from sqlalchemy import Column, String, Integer, DateTime, JSON, Uuid, func
import uuid
from app.database import Base


class Project(Base):
    """User-owned project; the whole undo/redo history lives in one JSON document."""
    __tablename__ = "projects"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_email = Column(String(255), nullable=False, index=True)
    project_name = Column(String(255), nullable=False)
    # Plain JSON, not JSONB: file maps must come back in insertion order
    history = Column(JSON, nullable=False)  # {versions, currentIndex}
    revision = Column(Integer, nullable=False, default=0)  # Bumped on every stored mutation
    last_mutation_id = Column(String(36), nullable=True)  # Write token of the latest stored mutation
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
