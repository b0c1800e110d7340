"""Per-user workspace view: all projects plus the one to open first."""
from app.schemas.project import WorkspaceResponse
from app.services.projects import ProjectRepository


def load_workspace(repository: ProjectRepository, owner_email: str) -> WorkspaceResponse:
    """Compose the workspace; the most recently updated project becomes active."""
    projects = repository.list(owner_email)
    return WorkspaceResponse(
        projects=projects,
        activeProjectId=projects[0].id if projects else None,
    )
