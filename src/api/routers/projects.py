"""Project routes for the Reelsmith API."""

import logging

from api.dependencies import Store, UserId
from api.schemas import (
    MessageResponse,
    ProjectCreateRequest,
    ProjectDetailResponse,
    ProjectResponse,
    ProjectUpdateRequest,
)
from fastapi import APIRouter
from services.errors import NotFoundOrUnauthorized, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Projects"])


@router.post(
    "/api/projects",
    response_model=ProjectResponse,
    status_code=201,
    summary="Create project",
    responses={400: {"description": "Name is required"}},
)
async def create_project(request: ProjectCreateRequest, user_id: UserId, store: Store) -> dict:
    """Create a project owned by the caller."""
    name = request.name.strip()
    if not name:
        raise ValidationError("Name is required")

    project = await store.create_project(
        user_id,
        name=name,
        description=request.description,
        script=request.script,
        medium=request.medium,
    )
    return project.to_dict()


@router.get("/api/projects", response_model=list[ProjectResponse], summary="List projects")
async def list_projects(user_id: UserId, store: Store) -> list[dict]:
    """List the caller's projects, newest first."""
    projects = await store.list_projects(user_id)
    return [project.to_dict() for project in projects]


@router.get(
    "/api/projects/{project_id}",
    response_model=ProjectDetailResponse,
    summary="Get project",
    responses={404: {"description": "Project not found"}},
)
async def get_project(project_id: str, user_id: UserId, store: Store) -> dict:
    """Get a project with its videos."""
    project = await store.get_project(project_id, user_id)
    if project is None:
        raise NotFoundOrUnauthorized("Project", project_id)

    videos = await store.list_videos(user_id, project_id=project_id)
    return {**project.to_dict(), "videos": [video.to_dict() for video in videos]}


@router.put(
    "/api/projects/{project_id}",
    response_model=ProjectResponse,
    summary="Update project",
    responses={400: {"description": "Name is required"}, 404: {"description": "Project not found"}},
)
async def update_project(
    project_id: str, request: ProjectUpdateRequest, user_id: UserId, store: Store
) -> dict:
    """Update a project.

    A request carrying a script may omit the name; any other update must
    include a non-empty name.
    """
    fields = request.model_dump(exclude_none=True)
    if "name" in fields:
        fields["name"] = fields["name"].strip()
    if request.script is None and not fields.get("name"):
        raise ValidationError("Name is required")
    if "name" in fields and not fields["name"]:
        del fields["name"]

    project = await store.update_project(project_id, user_id, **fields)
    if project is None:
        raise NotFoundOrUnauthorized("Project", project_id)
    return project.to_dict()


@router.delete(
    "/api/projects/{project_id}",
    response_model=MessageResponse,
    summary="Delete project",
    responses={404: {"description": "Project not found"}},
)
async def delete_project(project_id: str, user_id: UserId, store: Store) -> dict:
    """Delete a project and everything in it."""
    if not await store.delete_project(project_id, user_id):
        raise NotFoundOrUnauthorized("Project", project_id)
    return {"message": "Project deleted successfully"}
