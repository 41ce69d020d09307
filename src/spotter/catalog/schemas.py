"""Exercise variants: shipped System exercises and locally created User exercises."""

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class SystemExercise(BaseModel):
    """Catalog entry shipped with the app. Immutable for the session."""

    model_config = ConfigDict(frozen=True)

    source: Literal["system"] = "system"
    id: str = Field(description='Stable id, "sys:" + slug of the name unless the catalog supplies one')
    name: str
    aliases: List[str] = Field(default_factory=list)
    body_part: Optional[str] = None
    target: Optional[str] = None
    equipment: List[str] = Field(default_factory=list)
    primary_muscles: List[str] = Field(default_factory=list)
    secondary_muscles: List[str] = Field(default_factory=list)
    category: Optional[str] = None
    instructions: List[str] = Field(default_factory=list)
    force: Optional[str] = Field(default=None, description='"push" | "pull"')
    mechanic: Optional[str] = Field(default=None, description='"compound" | "isolation"')
    level: Optional[str] = None
    is_anchor: bool = Field(
        default=False, description="Canonical default for a generic query"
    )


class UserExercise(BaseModel):
    """Exercise created by the user on demand."""

    model_config = ConfigDict(frozen=True)

    source: Literal["user"] = "user"
    id: str = Field(description='Stable id, "usr:" + UUID')
    name: str
    aliases: List[str] = Field(default_factory=list)
    created_at: datetime
    equipment: List[str] = Field(default_factory=list)
    primary_muscles: List[str] = Field(default_factory=list)
    secondary_muscles: List[str] = Field(default_factory=list)
    category: Optional[str] = None
    force: Optional[str] = None
    mechanic: Optional[str] = None
    level: Optional[str] = None


Exercise = Annotated[Union[SystemExercise, UserExercise], Field(discriminator="source")]


# Variant-specific fields. User exercises never carry these.

def target_of(exercise: Exercise) -> Optional[str]:
    if isinstance(exercise, SystemExercise):
        return exercise.target
    return None


def body_part_of(exercise: Exercise) -> Optional[str]:
    if isinstance(exercise, SystemExercise):
        return exercise.body_part
    return None


def is_flagged_anchor(exercise: Exercise) -> bool:
    if isinstance(exercise, SystemExercise):
        return exercise.is_anchor
    return False
