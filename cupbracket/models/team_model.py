from uuid import uuid4
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TEAM_COUNT = 7


class PlayerModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = Field(min_length=1)
    number: str = "00" # Kept as text so "07" survives
    position: str = "Player"

    # Hand-edited files may carry the number as 10 instead of "10"
    model_config = ConfigDict(from_attributes=True, coerce_numbers_to_str=True)


class TeamModel(BaseModel):
    id: str = Field(default_factory=lambda: f"team-{uuid4().hex[:12]}")
    name: str
    logo: Optional[str] = None # Opaque reference, usually a URL
    players: List[PlayerModel] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


def default_teams() -> List[TeamModel]:
    return [
        TeamModel(id=f"team-{i}", name=f"Football Team {i}")
        for i in range(1, DEFAULT_TEAM_COUNT + 1)
    ]
