"""Owner-scoped persistence of projects and their history documents."""
import uuid
from typing import Any, Callable, List, Optional, Tuple, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.constants import MessageRole, WELCOME_MESSAGE
from app.models import Project
from app.schemas.app_state import AppState, HistoryDocument, Message
from app.schemas.project import ProjectResponse, ProjectSummary
from app.services.history import VersionHistory
from app.utils.clock import Clock, ensure_utc, utc_now
from app.utils.exceptions import (
    AppException,
    ConflictError,
    handle_database_error,
    not_found_error,
    validation_error,
)
from app.utils.logger import logger
from app.utils.serialization import parse_uuid, serialize_uuid

T = TypeVar("T")


def genesis_state(project_name: str, clock: Clock = utc_now) -> AppState:
    """Initial snapshot of every new project: no files, one welcome message."""
    return AppState(
        files={},
        previewHtml="",
        standaloneHtml="",
        chatMessages=[Message(role=MessageRole.MODEL, content=WELCOME_MESSAGE, timestamp=clock())],
        hasGeneratedCode=False,
        projectName=project_name,
        projectPlan=None,
    )


def to_response(project: Project) -> ProjectResponse:
    """Convert SQLAlchemy model to response model."""
    return ProjectResponse(
        id=serialize_uuid(project.id),
        ownerId=project.owner_email,
        projectName=project.project_name,
        history=HistoryDocument.model_validate(project.history),
        revision=project.revision,
        createdAt=ensure_utc(project.created_at),
        updatedAt=ensure_utc(project.updated_at),
    )


def to_summary(project: Project) -> ProjectSummary:
    history = VersionHistory.from_document(project.history)
    current = history.current()
    return ProjectSummary(
        id=serialize_uuid(project.id),
        projectName=project.project_name,
        updatedAt=ensure_utc(project.updated_at),
        currentIndex=history.current_index,
        versionCount=len(history),
        fileCount=len(current.files),
        messageCount=len(current.chatMessages),
        hasGeneratedCode=current.hasGeneratedCode,
    )


class ProjectRepository:
    """
    CRUD over projects, every query filtered by the owner's email.

    A project owned by someone else is reported as not found so that ids
    cannot be probed across accounts. Storage failures are rolled back and
    raised as TransientStorageError; retrying is the caller's job.
    """

    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    def _query_owned(self, owner_email: str, project_id: str, lock: bool = False):
        try:
            key = parse_uuid(project_id, "project ID")
        except ValueError:
            # A malformed id cannot name an existing project
            raise not_found_error("Project")
        query = self.db.query(Project).filter(Project.id == key, Project.owner_email == owner_email)
        if lock:
            query = query.with_for_update()
        return query

    def _run(self, operation: str, action: Callable[[], T]) -> T:
        try:
            return action()
        except AppException:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to {operation}: {e}", exc_info=True)
            raise handle_database_error(e, operation)

    def create(self, owner_email: str, project_name: str, project_id: Optional[uuid.UUID] = None) -> Project:
        """
        Insert a project with a one-version history.

        Passing the same ``project_id`` again returns the stored project
        instead of inserting a second one.
        """
        key = project_id or uuid.uuid4()

        def action() -> Project:
            existing = self.db.query(Project).filter(
                Project.id == key, Project.owner_email == owner_email
            ).first()
            if existing:
                return existing
            history = VersionHistory.start(genesis_state(project_name, self.clock))
            now = self.clock()
            project = Project(
                id=key,
                owner_email=owner_email,
                project_name=project_name,
                history=history.to_document(),
                revision=0,
                created_at=now,
                updated_at=now,
            )
            self.db.add(project)
            self.db.commit()
            self.db.refresh(project)
            logger.info(f"Created project {project.id} ({project_name!r}) for {owner_email}")
            return project

        return self._run("create_project", action)

    def get(self, owner_email: str, project_id: str) -> Project:
        def action() -> Project:
            project = self._query_owned(owner_email, project_id).first()
            if not project:
                raise not_found_error("Project")
            return project

        return self._run("get_project", action)

    def list(self, owner_email: str) -> List[ProjectSummary]:
        def action() -> List[ProjectSummary]:
            projects = self.db.query(Project).filter(
                Project.owner_email == owner_email
            ).order_by(Project.updated_at.desc(), Project.created_at.desc()).all()
            return [to_summary(project) for project in projects]

        return self._run("list_projects", action)

    def _lock_for_write(self, owner_email: str, project_id: str) -> Project:
        project = self._query_owned(owner_email, project_id, lock=True).first()
        if not project:
            raise not_found_error("Project")
        return project

    def _store(self, project: Project, mutation_id: Optional[str]) -> Project:
        project.revision += 1
        project.last_mutation_id = mutation_id
        project.updated_at = self.clock()
        self.db.commit()
        self.db.refresh(project)
        return project

    def _replayed(self, project: Project, mutation_id: Optional[str]) -> bool:
        """True when the write tagged ``mutation_id`` is already stored (a retry after a lost ack)."""
        if mutation_id is None or project.last_mutation_id != mutation_id:
            return False
        self.db.commit()
        self.db.refresh(project)
        logger.info(f"Write {mutation_id} already stored for project {project.id}, not reapplying")
        return True

    def update(
        self,
        owner_email: str,
        project_id: str,
        body_id: str,
        project_name: str,
        history_document: Any,
        expected_revision: Optional[int] = None,
        mutation_id: Optional[str] = None,
    ) -> Project:
        """Replace name and history wholesale."""
        if body_id != project_id:
            raise validation_error("Project ID mismatch in request body and URL")
        history = VersionHistory.from_document(history_document)

        def action() -> Project:
            project = self._lock_for_write(owner_email, project_id)
            if self._replayed(project, mutation_id):
                return project
            if expected_revision is not None and expected_revision != project.revision:
                raise ConflictError(
                    "Project was modified by another session",
                    currentRevision=project.revision,
                )
            project.project_name = project_name
            project.history = history.to_document()
            return self._store(project, mutation_id)

        return self._run("update_project", action)

    def delete(self, owner_email: str, project_id: str) -> None:
        """Delete a project; deleting a missing project is not an error."""
        def action() -> None:
            try:
                deleted = self._query_owned(owner_email, project_id).delete(synchronize_session=False)
            except AppException:
                deleted = 0
            self.db.commit()
            if deleted:
                logger.info(f"Deleted project {project_id} for {owner_email}")

        self._run("delete_project", action)

    def mutate_history(
        self,
        owner_email: str,
        project_id: str,
        operation: Callable[[VersionHistory], AppState],
        mutation_id: Optional[str] = None,
    ) -> Tuple[Project, VersionHistory, AppState]:
        """
        Apply ``operation`` to the stored history under a row lock and persist it.

        If ``operation`` raises (including the undo/redo boundary signals) the
        transaction is rolled back and nothing is written. When ``mutation_id``
        names the write already stored, the stored position is returned and
        ``operation`` is not applied again.
        """
        def action() -> Tuple[Project, VersionHistory, AppState]:
            project = self._lock_for_write(owner_email, project_id)
            if self._replayed(project, mutation_id):
                history = VersionHistory.from_document(project.history)
                return project, history, history.current()
            history = VersionHistory.from_document(project.history)
            result = operation(history)
            project.history = history.to_document()
            project.project_name = history.current().projectName
            self._store(project, mutation_id)
            return project, history, result

        return self._run("update_history", action)
