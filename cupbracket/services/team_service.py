from typing import Optional

from cupbracket.core.exceptions import PlayerNotFound, TeamNotFound, TournamentAlreadyStarted
from cupbracket.models.team_model import PlayerModel, TeamModel
from cupbracket.models.tournament_model import TournamentState


def _require_team(state: TournamentState, team_id: str) -> TeamModel:
    team = state.find_team(team_id)
    if team is None:
        raise TeamNotFound(f"Team with ID {team_id} not found.")
    return team


def _clean_name(name: str, what: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValueError(f"{what} name cannot be empty.")
    return name


def add_team(state: TournamentState, name: str, logo: Optional[str] = None) -> TournamentState:
    if state.tournament_started:
        raise TournamentAlreadyStarted("Teams cannot be added once the bracket has been generated.")

    team = TeamModel(name=_clean_name(name, "Team"), logo=logo or None)
    while state.find_team(team.id) is not None:
        team = TeamModel(name=team.name, logo=team.logo)

    new_state = state.model_copy(deep=True)
    new_state.teams.append(team)
    return new_state


def remove_team(state: TournamentState, team_id: str) -> TournamentState:
    if state.tournament_started:
        raise TournamentAlreadyStarted("Teams cannot be removed once the bracket has been generated.")
    _require_team(state, team_id)

    new_state = state.model_copy(deep=True)
    new_state.teams = [t for t in new_state.teams if t.id != team_id]
    return new_state


def update_team(
    state: TournamentState,
    team_id: str,
    name: Optional[str] = None,
    logo: Optional[str] = None,
) -> TournamentState:
    """Edits display metadata only; the team id, and so the bracket, is unaffected."""
    new_state = state.model_copy(deep=True)
    team = _require_team(new_state, team_id)

    if name is not None:
        team.name = _clean_name(name, "Team")
    if logo is not None:
        team.logo = logo.strip() or None # An empty string clears the logo
    return new_state


def add_player(
    state: TournamentState,
    team_id: str,
    name: str,
    number: Optional[str] = None,
    position: Optional[str] = None,
) -> TournamentState:
    new_state = state.model_copy(deep=True)
    team = _require_team(new_state, team_id)

    player = PlayerModel(
        name=_clean_name(name, "Player"),
        number=(number or "").strip() or "00",
        position=(position or "").strip() or "Player",
    )
    team.players.append(player)
    return new_state


def remove_player(state: TournamentState, team_id: str, player_id: str) -> TournamentState:
    new_state = state.model_copy(deep=True)
    team = _require_team(new_state, team_id)

    remaining = [p for p in team.players if p.id != player_id]
    if len(remaining) == len(team.players):
        raise PlayerNotFound(f"Player with ID {player_id} not found in team {team_id}.")
    team.players = remaining
    return new_state
