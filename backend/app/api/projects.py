"""Projects API endpoints."""
import uuid
from typing import Callable, List, Tuple

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.credits import get_quota_tracker
from app.auth.identity import UserIdentity, get_current_user
from app.database import get_db
from app.models import Project
from app.schemas.app_state import AppState, VersionSummary
from app.schemas.credits import CreditsResponse
from app.schemas.project import (
    NavigationResponse,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
    RenameRequest,
    TurnRequest,
    TurnResponse,
    WorkspaceResponse,
)
from app.services.edit_generator import EditGenerator, get_edit_generator
from app.services.edits import append_error_message, append_user_message, apply_proposal, rename
from app.services.export import archive_filename, build_project_archive
from app.services.history import VersionHistory
from app.services.projects import ProjectRepository, to_response
from app.services.quota import QuotaTracker
from app.services.workspace import load_workspace
from app.utils.exceptions import AtGenesis, AtHead, EditGenerationError, QuotaExceededError
from app.utils.logger import logger
from app.utils.retry import new_mutation_id, with_storage_retries

router = APIRouter(prefix="/api/projects", tags=["projects"])


def get_repository(db: Session = Depends(get_db)) -> ProjectRepository:
    """Dependency for getting the project repository."""
    return ProjectRepository(db)


def _navigation(
    project: Project,
    history: VersionHistory,
    moved: bool = True,
    response_cls=NavigationResponse,
    **extra,
) -> NavigationResponse:
    return response_cls(
        state=history.current(),
        currentIndex=history.current_index,
        versionCount=len(history),
        canUndo=history.can_undo,
        canRedo=history.can_redo,
        moved=moved,
        revision=project.revision,
        **extra,
    )


async def _mutate(
    repository: ProjectRepository,
    user: UserIdentity,
    project_id: str,
    operation: Callable[[VersionHistory], AppState],
) -> Tuple[Project, VersionHistory, AppState]:
    """Apply a history operation; retries of a write that was already stored do not reapply it."""
    mutation_id = new_mutation_id()
    return await with_storage_retries(
        lambda: repository.mutate_history(user.email, project_id, operation, mutation_id=mutation_id)
    )


async def _unmoved(repository: ProjectRepository, user: UserIdentity, project_id: str) -> NavigationResponse:
    """Current position after a refused undo/redo."""
    project = await with_storage_retries(lambda: repository.get(user.email, project_id))
    return _navigation(project, VersionHistory.from_document(project.history), moved=False)


@router.get("", response_model=WorkspaceResponse)
async def get_workspace(
    user: UserIdentity = Depends(get_current_user),
    repository: ProjectRepository = Depends(get_repository),
) -> WorkspaceResponse:
    """
    Get all projects of the caller, most recently updated first.

    The first project is reported as the active one.
    """
    return await with_storage_retries(lambda: load_workspace(repository, user.email))


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project: ProjectCreate,
    user: UserIdentity = Depends(get_current_user),
    repository: ProjectRepository = Depends(get_repository),
) -> ProjectResponse:
    """
    Create a new project with a one-version history.

    Args:
        project: Project creation data
        user: Caller identity
        repository: Project repository

    Returns:
        Created project
    """
    project_key = uuid.uuid4()
    created = await with_storage_retries(
        lambda: repository.create(user.email, project.projectName, project_id=project_key)
    )
    return to_response(created)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    user: UserIdentity = Depends(get_current_user),
    repository: ProjectRepository = Depends(get_repository),
) -> ProjectResponse:
    """Get a project with its full history."""
    return to_response(await with_storage_retries(lambda: repository.get(user.email, project_id)))


@router.put("/{project_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def update_project(
    project_id: str,
    project_update: ProjectUpdate,
    user: UserIdentity = Depends(get_current_user),
    repository: ProjectRepository = Depends(get_repository),
) -> Response:
    """
    Replace a project's name and history.

    Args:
        project_id: The project ID from the URL
        project_update: Full project body; its id must match the URL
        user: Caller identity
        repository: Project repository
    """
    mutation_id = new_mutation_id()
    await with_storage_retries(lambda: repository.update(
        user.email,
        project_id,
        project_update.id,
        project_update.projectName,
        project_update.history,
        expected_revision=project_update.revision,
        mutation_id=mutation_id,
    ))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_project(
    project_id: str,
    user: UserIdentity = Depends(get_current_user),
    repository: ProjectRepository = Depends(get_repository),
) -> Response:
    """Delete a project. Deleting an already deleted project succeeds."""
    await with_storage_retries(lambda: repository.delete(user.email, project_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{project_id}/history", response_model=List[VersionSummary])
async def get_history(
    project_id: str,
    user: UserIdentity = Depends(get_current_user),
    repository: ProjectRepository = Depends(get_repository),
) -> List[VersionSummary]:
    """List every stored version of a project."""
    project = await with_storage_retries(lambda: repository.get(user.email, project_id))
    return VersionHistory.from_document(project.history).summaries()


@router.post("/{project_id}/history/commit", response_model=NavigationResponse)
async def commit_version(
    project_id: str,
    state: AppState,
    user: UserIdentity = Depends(get_current_user),
    repository: ProjectRepository = Depends(get_repository),
) -> NavigationResponse:
    """Append a new version after the cursor, discarding any redo tail."""
    project, history, _ = await _mutate(repository, user, project_id, lambda h: h.commit(state))
    return _navigation(project, history)


@router.post("/{project_id}/history/undo", response_model=NavigationResponse)
async def undo(
    project_id: str,
    user: UserIdentity = Depends(get_current_user),
    repository: ProjectRepository = Depends(get_repository),
) -> NavigationResponse:
    """Step back one version; at the first version nothing moves."""
    try:
        project, history, _ = await _mutate(repository, user, project_id, lambda h: h.undo())
    except AtGenesis:
        return await _unmoved(repository, user, project_id)
    return _navigation(project, history)


@router.post("/{project_id}/history/redo", response_model=NavigationResponse)
async def redo(
    project_id: str,
    user: UserIdentity = Depends(get_current_user),
    repository: ProjectRepository = Depends(get_repository),
) -> NavigationResponse:
    """Step forward one version; at the latest version nothing moves."""
    try:
        project, history, _ = await _mutate(repository, user, project_id, lambda h: h.redo())
    except AtHead:
        return await _unmoved(repository, user, project_id)
    return _navigation(project, history)


@router.post("/{project_id}/history/restore/{index}", response_model=NavigationResponse)
async def restore_version(
    project_id: str,
    index: int,
    user: UserIdentity = Depends(get_current_user),
    repository: ProjectRepository = Depends(get_repository),
) -> NavigationResponse:
    """Move the cursor to any stored version."""
    project, history, _ = await _mutate(repository, user, project_id, lambda h: h.restore(index))
    return _navigation(project, history)


@router.post("/{project_id}/rename", response_model=NavigationResponse)
async def rename_project(
    project_id: str,
    request: RenameRequest,
    user: UserIdentity = Depends(get_current_user),
    repository: ProjectRepository = Depends(get_repository),
) -> NavigationResponse:
    """Rename a project; the rename is recorded as a new version."""
    project, history, _ = await _mutate(
        repository, user, project_id, lambda h: h.commit(rename(h.current(), request.projectName))
    )
    return _navigation(project, history)


@router.post("/{project_id}/turns", response_model=TurnResponse)
async def run_turn(
    project_id: str,
    request: TurnRequest,
    user: UserIdentity = Depends(get_current_user),
    repository: ProjectRepository = Depends(get_repository),
    tracker: QuotaTracker = Depends(get_quota_tracker),
    generator: EditGenerator = Depends(get_edit_generator),
) -> TurnResponse:
    """
    Run one AI turn against the project's current version.

    Spends one daily credit, records the user's message as a version, asks
    the edit generator for a proposal and records the merged result as the
    next version. Generator failures are recorded in the chat instead.
    """
    # Unknown projects must not cost a credit
    await with_storage_retries(lambda: repository.get(user.email, project_id))

    # Single attempt: consume is not idempotent
    if not tracker.consume(user.email):
        usage = tracker.get_usage(user.email)
        raise QuotaExceededError(usage.resetDate, usage.max)

    _, _, user_state = await _mutate(
        repository, user, project_id, lambda h: h.commit(append_user_message(h.current(), request.message))
    )

    files = dict(user_state.files) if user_state.hasGeneratedCode else None
    proposal = None
    failure_message = None
    try:
        proposal = await generator.propose_edit(list(user_state.chatMessages), files)
    except EditGenerationError as e:
        logger.warning(f"Edit generation failed for project {project_id}: {e.message}")
        failure_message = e.message

    def next_state(current: AppState) -> AppState:
        if proposal is None:
            return append_error_message(current, failure_message)
        return apply_proposal(current, proposal)

    project, history, _ = await _mutate(
        repository, user, project_id, lambda h: h.commit(next_state(h.current()))
    )

    return _navigation(
        project,
        history,
        response_cls=TurnResponse,
        responseType=proposal.responseType if proposal else None,
        credits=CreditsResponse.from_info(tracker.get_usage(user.email)),
    )


@router.get("/{project_id}/export")
async def export_project(
    project_id: str,
    user: UserIdentity = Depends(get_current_user),
    repository: ProjectRepository = Depends(get_repository),
) -> Response:
    """Download the current version's files as a zip archive."""
    project = await with_storage_retries(lambda: repository.get(user.email, project_id))
    current = VersionHistory.from_document(project.history).current()
    return Response(
        content=build_project_archive(current.files),
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{archive_filename(current.projectName)}"'},
    )
