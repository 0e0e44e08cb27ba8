"""Admin-only content management endpoints, all behind the access token guard."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from schemas import (
    BlogPost,
    BlogPostCreate,
    BlogPostUpdate,
    Education,
    EducationCreate,
    EducationUpdate,
    Module,
    ModuleCreate,
    ModuleUpdate,
    Project,
    ProjectCreate,
    ProjectUpdate,
    Skill,
    SkillCreate,
    SkillUpdate,
)

from ..domain.content import ContentService
from ..security.guard import AdminIdentity, require_admin
from .dependencies import get_content_service
from .responses import ItemResponse, ListResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/admin", tags=["admin"], dependencies=[Depends(require_admin)])

ADMIN_ENDPOINTS = [
    "GET /api/v1/admin/me",
    "POST /api/v1/admin/education",
    "PATCH /api/v1/admin/education/:id",
    "DELETE /api/v1/admin/education/:id",
    "POST /api/v1/admin/modules",
    "PATCH /api/v1/admin/modules/:id",
    "DELETE /api/v1/admin/modules/:id",
    "POST /api/v1/admin/skills",
    "PATCH /api/v1/admin/skills/:id",
    "DELETE /api/v1/admin/skills/:id",
    "POST /api/v1/admin/projects",
    "PATCH /api/v1/admin/projects/:id",
    "DELETE /api/v1/admin/projects/:id",
    "GET /api/v1/admin/blog",
    "POST /api/v1/admin/blog",
    "PATCH /api/v1/admin/blog/:id",
    "DELETE /api/v1/admin/blog/:id",
]


@router.get("/me", response_model=AdminIdentity)
def whoami(identity: AdminIdentity = Depends(require_admin)) -> AdminIdentity:
    """Return the identity the guard attached to this request."""
    return identity


# Education


@router.post("/education", response_model=ItemResponse[Education], status_code=status.HTTP_201_CREATED)
def create_education(
    payload: EducationCreate,
    identity: AdminIdentity = Depends(require_admin),
    service: ContentService = Depends(get_content_service),
) -> ItemResponse[Education]:
    logger.info("admin %s creating education %s", identity.username, payload.slug)
    return ItemResponse(data=service.create_education(payload))


@router.patch("/education/{education_id}", response_model=ItemResponse[Education])
def update_education(
    education_id: UUID,
    payload: EducationUpdate,
    service: ContentService = Depends(get_content_service),
) -> ItemResponse[Education]:
    return ItemResponse(data=service.update_education(education_id, payload))


@router.delete("/education/{education_id}", response_model=MessageResponse)
def delete_education(
    education_id: UUID, service: ContentService = Depends(get_content_service)
) -> MessageResponse:
    service.delete_education(education_id)
    return MessageResponse(message="Education deleted successfully")


# Modules


@router.post("/modules", response_model=ItemResponse[Module], status_code=status.HTTP_201_CREATED)
def create_module(
    payload: ModuleCreate, service: ContentService = Depends(get_content_service)
) -> ItemResponse[Module]:
    return ItemResponse(data=service.create_module(payload))


@router.patch("/modules/{module_id}", response_model=ItemResponse[Module])
def update_module(
    module_id: UUID,
    payload: ModuleUpdate,
    service: ContentService = Depends(get_content_service),
) -> ItemResponse[Module]:
    return ItemResponse(data=service.update_module(module_id, payload))


@router.delete("/modules/{module_id}", response_model=MessageResponse)
def delete_module(module_id: UUID, service: ContentService = Depends(get_content_service)) -> MessageResponse:
    service.delete_module(module_id)
    return MessageResponse(message="Module deleted successfully")


# Skills


@router.post("/skills", response_model=ItemResponse[Skill], status_code=status.HTTP_201_CREATED)
def create_skill(payload: SkillCreate, service: ContentService = Depends(get_content_service)) -> ItemResponse[Skill]:
    return ItemResponse(data=service.create_skill(payload))


@router.patch("/skills/{skill_id}", response_model=ItemResponse[Skill])
def update_skill(
    skill_id: UUID,
    payload: SkillUpdate,
    service: ContentService = Depends(get_content_service),
) -> ItemResponse[Skill]:
    return ItemResponse(data=service.update_skill(skill_id, payload))


@router.delete("/skills/{skill_id}", response_model=MessageResponse)
def delete_skill(skill_id: UUID, service: ContentService = Depends(get_content_service)) -> MessageResponse:
    service.delete_skill(skill_id)
    return MessageResponse(message="Skill deleted successfully")


# Projects


@router.post("/projects", response_model=ItemResponse[Project], status_code=status.HTTP_201_CREATED)
def create_project(
    payload: ProjectCreate,
    identity: AdminIdentity = Depends(require_admin),
    service: ContentService = Depends(get_content_service),
) -> ItemResponse[Project]:
    logger.info("admin %s creating project %s", identity.username, payload.slug)
    return ItemResponse(data=service.create_project(payload))


@router.patch("/projects/{project_id}", response_model=ItemResponse[Project])
def update_project(
    project_id: UUID,
    payload: ProjectUpdate,
    service: ContentService = Depends(get_content_service),
) -> ItemResponse[Project]:
    return ItemResponse(data=service.update_project(project_id, payload))


@router.delete("/projects/{project_id}", response_model=MessageResponse)
def delete_project(project_id: UUID, service: ContentService = Depends(get_content_service)) -> MessageResponse:
    service.delete_project(project_id)
    return MessageResponse(message="Project deleted successfully")


# Blog


@router.get("/blog", response_model=ListResponse[BlogPost])
def list_all_blog_posts(service: ContentService = Depends(get_content_service)) -> ListResponse[BlogPost]:
    """Every post, drafts and scheduled ones included."""
    return ListResponse.of(service.list_all_posts())


@router.post("/blog", response_model=ItemResponse[BlogPost], status_code=status.HTTP_201_CREATED)
def create_blog_post(
    payload: BlogPostCreate,
    identity: AdminIdentity = Depends(require_admin),
    service: ContentService = Depends(get_content_service),
) -> ItemResponse[BlogPost]:
    logger.info("admin %s creating blog post %r", identity.username, payload.title)
    return ItemResponse(data=service.create_post(payload))


@router.patch("/blog/{post_id}", response_model=ItemResponse[BlogPost])
def update_blog_post(
    post_id: UUID,
    payload: BlogPostUpdate,
    service: ContentService = Depends(get_content_service),
) -> ItemResponse[BlogPost]:
    return ItemResponse(data=service.update_post(post_id, payload))


@router.delete("/blog/{post_id}", response_model=MessageResponse)
def delete_blog_post(post_id: UUID, service: ContentService = Depends(get_content_service)) -> MessageResponse:
    service.delete_post(post_id)
    return MessageResponse(message="Blog post deleted successfully")
