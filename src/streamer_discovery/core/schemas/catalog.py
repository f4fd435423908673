"""Keyword, notice and job-result schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class KeywordRead(BaseModel):
    id: uuid.UUID
    name: str
    type: str
    sort_order: int = 0

    model_config = ConfigDict(from_attributes=True)


class NoticeRead(BaseModel):
    """A site notice; important notices are listed first."""

    id: uuid.UUID
    title: str
    content: str
    is_important: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class JobResult(BaseModel):
    """Body returned by the cron routes."""

    success: bool
    message: str
    summary: dict[str, Any] = {}
