"""Pydantic request bodies for the activity routes."""

from typing import Optional

from pydantic import BaseModel, Field


class CreateActivityInput(BaseModel):
    """A single activity; action is checked by the route, not the model."""

    action: Optional[str] = None


class CreateBulkActivitiesInput(BaseModel):
    activities: list[CreateActivityInput] = Field(default_factory=list)

    def actions(self) -> list[str]:
        return [a.action for a in self.activities if a.action]


class LegacyBulkInput(BaseModel):
    """Deprecated bulk body: a bare list of action names."""

    actions: Optional[list[str]] = None
