from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from cupbracket.models.bracket_model import MatchModel, MatchSlot, FINAL_ID
from cupbracket.models.team_model import TeamModel, default_teams

STATE_VERSION = 1


class TournamentState(BaseModel):
    """
    Everything the tool knows about one tournament.

    Serialized with the camelCase keys the original browser tool used
    (``teams``, ``matches``, ``isTournamentStarted``) so its exports import
    cleanly. ``version`` lets future layouts be migrated on load.
    """
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    version: int = STATE_VERSION
    teams: List[TeamModel] = Field(default_factory=default_teams)
    matches: List[MatchModel] = Field(default_factory=list)
    tournament_started: bool = Field(
        default=False,
        validation_alias=AliasChoices("isTournamentStarted", "tournamentStarted", "tournament_started"),
        serialization_alias="isTournamentStarted",
    )

    def find_match(self, match_id: str) -> Optional[MatchModel]:
        return next((m for m in self.matches if m.id == match_id), None)

    def find_team(self, team_id: str) -> Optional[TeamModel]:
        return next((t for t in self.teams if t.id == team_id), None)

    @property
    def champion_id(self) -> Optional[str]:
        final_match = self.find_match(FINAL_ID)
        return final_match.winner_id if final_match else None

    @property
    def bye_team_id(self) -> Optional[str]:
        """The team sitting in a round-2 slot that no round-1 match feeds."""
        fed_slots = {
            (m.next_match_id, MatchSlot(m.slot_in_next_match))
            for m in self.matches
            if m.round == 1 and m.next_match_id and m.slot_in_next_match
        }
        for match in self.matches:
            if match.round != 2:
                continue
            for slot in (MatchSlot.TEAM1, MatchSlot.TEAM2):
                team_id = match.team_in(slot)
                if team_id and (match.id, slot) not in fed_slots:
                    return team_id
        return None

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
