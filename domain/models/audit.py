"""
Audit record for reasoning-assisted selections.

Written only when resolution fell through to the reasoning service and it
selected an existing catalog entry, so ambiguous matches can be reviewed.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UnresolvedMention(BaseModel):
    """Free-text exercise name that needed the reasoning service to resolve."""

    model_config = ConfigDict(frozen=True)

    original_name: str = Field(..., min_length=1, description="Name as written by the user")
    resolved_exercise_id: str = Field(..., description="Catalog id chosen by the reasoning service")
    user_id: str = Field(..., description="User who submitted the workout")
    workout_id: Optional[str] = Field(default=None, description="Workout being parsed")
