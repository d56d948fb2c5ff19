# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel


class TransitionResponse(BaseModel):
    """Acknowledgement returned by every status transition."""

    id: uuid.UUID
    status: str
    message: str
