from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path
from pydantic import BaseModel, Field

from cupbracket.api.dependencies import get_tournament_service, to_http_exception
from cupbracket.core.exceptions import TournamentError
from cupbracket.models.team_model import TeamModel
from cupbracket.services.tournament_service import TournamentService

router = APIRouter()

# --- DTOs ---

class TeamCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    logo: Optional[str] = Field(None, description="Logo URL or any opaque reference.")


class TeamUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    logo: Optional[str] = Field(None, description="An empty string removes the logo.")


class PlayerCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    number: Optional[str] = Field(None, max_length=3, description="Jersey number, defaults to 00.")
    position: Optional[str] = Field(None, max_length=50, description="Defaults to Player.")


def _team_or_404(service: TournamentService, team_id: str) -> TeamModel:
    team = service.get_state().find_team(team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")
    return team


# --- Team Endpoints ---

@router.get("", response_model=List[TeamModel], summary="List Teams")
async def list_teams(service: TournamentService = Depends(get_tournament_service)):
    return service.get_state().teams


@router.post("", response_model=TeamModel, status_code=201, summary="Add Team")
async def add_team(payload: TeamCreateRequest, service: TournamentService = Depends(get_tournament_service)):
    """Adds a team to the roster. Only possible before the bracket is generated."""
    try:
        state = service.add_team(payload.name, payload.logo)
    except TournamentError as e:
        raise to_http_exception(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return state.teams[-1]


@router.get("/{team_id}", response_model=TeamModel, summary="Get Team")
async def get_team(
    team_id: str = Path(..., description="The ID of the team"),
    service: TournamentService = Depends(get_tournament_service),
):
    return _team_or_404(service, team_id)


@router.patch("/{team_id}", response_model=TeamModel, summary="Edit Team Name or Logo")
async def update_team(
    payload: TeamUpdateRequest,
    team_id: str = Path(..., description="The ID of the team"),
    service: TournamentService = Depends(get_tournament_service),
):
    """Renames a team or changes its logo. Allowed at any time; the bracket refers to teams by id."""
    try:
        service.update_team(team_id, name=payload.name, logo=payload.logo)
    except TournamentError as e:
        raise to_http_exception(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _team_or_404(service, team_id)


@router.delete("/{team_id}", status_code=204, summary="Remove Team")
async def remove_team(
    team_id: str = Path(..., description="The ID of the team"),
    service: TournamentService = Depends(get_tournament_service),
):
    try:
        service.remove_team(team_id)
    except TournamentError as e:
        raise to_http_exception(e)
    return None


@router.post("/{team_id}/players", response_model=TeamModel, status_code=201, summary="Add Player")
async def add_player(
    payload: PlayerCreateRequest,
    team_id: str = Path(..., description="The ID of the team"),
    service: TournamentService = Depends(get_tournament_service),
):
    try:
        service.add_player(team_id, payload.name, number=payload.number, position=payload.position)
    except TournamentError as e:
        raise to_http_exception(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _team_or_404(service, team_id)


@router.delete("/{team_id}/players/{player_id}", response_model=TeamModel, summary="Remove Player")
async def remove_player(
    team_id: str = Path(..., description="The ID of the team"),
    player_id: str = Path(..., description="The ID of the player"),
    service: TournamentService = Depends(get_tournament_service),
):
    try:
        service.remove_player(team_id, player_id)
    except TournamentError as e:
        raise to_http_exception(e)
    return _team_or_404(service, team_id)
