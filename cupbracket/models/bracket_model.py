from typing import List, Optional, Dict
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Fixed ids of the 7-team bracket
QUARTERFINAL_IDS = ("m-qf1", "m-qf2", "m-qf3")
SEMIFINAL_IDS = ("m-sf1", "m-sf2")
FINAL_ID = "m-final"

ROUND_NAMES = {1: "Quarterfinal", 2: "Semifinal", 3: "Final"}


class MatchSlot(str, Enum):
    TEAM1 = "team1"
    TEAM2 = "team2"

    @classmethod
    def from_number(cls, number: int) -> "MatchSlot":
        if number == 1:
            return cls.TEAM1
        if number == 2:
            return cls.TEAM2
        raise ValueError(f"Slot must be 1 or 2, got {number!r}.")


class MatchState(str, Enum):
    EMPTY = "EMPTY"          # at least one team slot still unfilled
    READY = "READY"          # both teams known, nothing entered yet
    SCORED = "SCORED"        # a non-zero score has been entered
    CONFIRMED = "CONFIRMED"  # winner recorded, match frozen


class MatchModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        from_attributes=True,
    )

    id: str
    round: int = Field(ge=1, le=3)

    team1_id: Optional[str] = None
    team2_id: Optional[str] = None

    score1: Optional[int] = Field(default=None, ge=0)
    score2: Optional[int] = Field(default=None, ge=0)

    winner_id: Optional[str] = None

    next_match_id: Optional[str] = None
    slot_in_next_match: Optional[MatchSlot] = None

    @property
    def is_frozen(self) -> bool:
        return self.winner_id is not None

    @property
    def has_both_teams(self) -> bool:
        return self.team1_id is not None and self.team2_id is not None

    @property
    def state(self) -> MatchState:
        if self.is_frozen:
            return MatchState.CONFIRMED
        if not self.has_both_teams:
            return MatchState.EMPTY
        if self.score1 or self.score2:
            return MatchState.SCORED
        return MatchState.READY

    def team_in(self, slot: MatchSlot) -> Optional[str]:
        return self.team1_id if slot == MatchSlot.TEAM1 else self.team2_id


class BracketModel(BaseModel):
    """Read-only view of the bracket grouped by round, for the UI."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    matches: List[MatchModel] = Field(default_factory=list)
    rounds_structure: Dict[int, List[str]] = Field(default_factory=dict) # round -> match ids
    round_names: Dict[int, str] = Field(default_factory=lambda: dict(ROUND_NAMES))
    bye_team_id: Optional[str] = None
    champion_id: Optional[str] = None
