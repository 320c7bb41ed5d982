"""Request bodies accepted by the HTTP API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RecommendRequest(BaseModel):
    """Body of the recommend-by-query endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    query: Any = None
    previous_criteria: dict[str, object] | None = Field(
        default=None, alias="previousCriteria"
    )
