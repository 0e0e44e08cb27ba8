"""Response envelopes shared by the public and admin routers."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

from schemas import Skill

T = TypeVar("T")


class ItemResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T


class ListResponse(BaseModel, Generic[T]):
    success: bool = True
    data: list[T]
    count: int

    @classmethod
    def of(cls, items: list[T]) -> "ListResponse[T]":
        return cls(data=items, count=len(items))


class SkillListResponse(ListResponse[Skill]):
    """Skills plus the same items grouped by category."""

    by_category: dict[str, list[Skill]]


class MessageResponse(BaseModel):
    message: str
