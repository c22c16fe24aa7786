"""Shared response pieces: the transient notice every page or action may carry."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class Notice(BaseModel):
    """Transient notification shown to the user."""

    level: Literal["success", "error", "info"] = Field(..., description="Notice severity")
    message: str = Field(..., description="Text shown to the user")


class ActionResponse(BaseModel):
    """Outcome of a user action that changes state."""

    message: str
    notice: Notice
    redirect_to: str | None = Field(None, description="Page to navigate to next")


def success(message: str) -> Notice:
    return Notice(level="success", message=message)


def error(message: str) -> Notice:
    return Notice(level="error", message=message)
