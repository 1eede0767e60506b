from pydantic import BaseModel, ConfigDict, Field


class PlayerSummary(BaseModel):
    """Immutable snapshot of a player as shown in directory listings."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int = Field(..., description="Primary key")
    username: str = Field(..., min_length=1, description="Unique display handle")
    profile_picture: str | None = Field(None, description="Avatar URL")
    credits: float = Field(..., ge=0.0, description="Current balance")
    rank: int = Field(..., ge=0, description="Purchased rank")
    role: str = Field(..., description="USER or ADMIN")
    is_active: bool = Field(..., description="False when banned")


class HackTarget(BaseModel):
    """Snapshot of a player as offered in the list of hack targets.

    Carries no balance or role, so hacks and role changes leave cached target
    lists valid.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int = Field(..., description="Primary key")
    username: str = Field(..., min_length=1, description="Unique display handle")
    profile_picture: str | None = Field(None, description="Avatar URL")
    rank: int = Field(..., ge=0, description="Purchased rank")
