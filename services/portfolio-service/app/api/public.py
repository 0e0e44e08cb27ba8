"""Public read-only content endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from schemas import BlogPost, Education, Project

from ..domain.content import ContentService, group_skills_by_category
from .admin import ADMIN_ENDPOINTS
from .dependencies import get_content_service
from .responses import ItemResponse, ListResponse, SkillListResponse

router = APIRouter(prefix="/api/v1", tags=["content"])

PUBLIC_ENDPOINTS = [
    "POST /api/v1/auth/login",
    "POST /api/v1/auth/logout",
    "GET /health",
    "GET /health/db",
    "GET /api/v1/education",
    "GET /api/v1/education/:slug",
    "GET /api/v1/projects",
    "GET /api/v1/projects/:slug",
    "GET /api/v1/skills",
    "GET /api/v1/blog",
    "GET /api/v1/blog/:slug",
]


@router.get("/")
def api_info() -> dict[str, object]:
    """Describe the API surface."""
    return {
        "message": "Portfolio API v1",
        "version": "1.0.0",
        "endpoints": {"public": PUBLIC_ENDPOINTS, "admin": ADMIN_ENDPOINTS},
    }


@router.get("/education", response_model=ListResponse[Education])
def list_education(service: ContentService = Depends(get_content_service)) -> ListResponse[Education]:
    return ListResponse.of(service.list_education())


@router.get("/education/{slug}", response_model=ItemResponse[Education])
def get_education(slug: str, service: ContentService = Depends(get_content_service)) -> ItemResponse[Education]:
    return ItemResponse(data=service.get_education(slug))


@router.get("/projects", response_model=ListResponse[Project])
def list_projects(
    featured: bool = Query(default=False),
    service: ContentService = Depends(get_content_service),
) -> ListResponse[Project]:
    """List active projects plus featured archived ones."""
    return ListResponse.of(service.list_projects(featured_only=featured))


@router.get("/projects/{slug}", response_model=ItemResponse[Project])
def get_project(slug: str, service: ContentService = Depends(get_content_service)) -> ItemResponse[Project]:
    return ItemResponse(data=service.get_project(slug))


@router.get("/skills", response_model=SkillListResponse)
def list_skills(
    category: str | None = Query(default=None),
    service: ContentService = Depends(get_content_service),
) -> SkillListResponse:
    skills = service.list_skills(category)
    return SkillListResponse(data=skills, count=len(skills), by_category=group_skills_by_category(skills))


@router.get("/blog", response_model=ListResponse[BlogPost])
def list_blog_posts(service: ContentService = Depends(get_content_service)) -> ListResponse[BlogPost]:
    return ListResponse.of(service.list_published_posts())


@router.get("/blog/{slug}", response_model=ItemResponse[BlogPost])
def get_blog_post(slug: str, service: ContentService = Depends(get_content_service)) -> ItemResponse[BlogPost]:
    return ItemResponse(data=service.get_published_post(slug))
