"""Base model shared by pybumpmap value objects.

Every model is frozen: points, fixes and samples never change once
created, so they can be shared between the ingestion thread and the
render pass without copying.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BumpMapModel(BaseModel):
    """Frozen base for all pybumpmap models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )
