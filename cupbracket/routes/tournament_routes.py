from typing import Optional, Union

from fastapi import APIRouter, Depends, Path, Request
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cupbracket.api.dependencies import get_tournament_service, to_http_exception
from cupbracket.core.exceptions import TournamentError
from cupbracket.models.bracket_model import BracketModel, MatchModel
from cupbracket.models.tournament_model import TournamentState
from cupbracket.services.tournament_service import TournamentService

router = APIRouter()

# --- DTOs (Data Transfer Objects) for request and response bodies ---

class ScoreEntryRequest(BaseModel):
    """Payload for entering one side's score."""
    slot: int = Field(..., ge=1, le=2, description="1 for the first team, 2 for the second.")
    value: Union[int, float, str, None] = Field(
        None, description="Raw score input; unparseable values count as 0."
    )


class ConfirmationResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    match: MatchModel
    next_match: Optional[MatchModel] = None
    champion_id: Optional[str] = None


# --- Tournament Endpoints ---

@router.get("", response_model=TournamentState, summary="Get Tournament State")
async def get_tournament(service: TournamentService = Depends(get_tournament_service)):
    """Returns the roster, the matches and whether the bracket has been generated."""
    return service.get_state()


@router.get("/bracket", response_model=BracketModel, summary="Get Bracket")
async def get_bracket(service: TournamentService = Depends(get_tournament_service)):
    """
    Returns the matches grouped by round, plus the bye team and, once the
    final is confirmed, the champion.
    """
    return service.get_bracket()


@router.post("/bracket", response_model=BracketModel, status_code=201, summary="Generate Bracket")
async def generate_bracket(service: TournamentService = Depends(get_tournament_service)):
    """
    Draws the bracket from the current roster. The roster must hold exactly 7
    teams and the bracket can only be drawn once until the tournament is reset.
    """
    try:
        return service.generate_bracket()
    except TournamentError as e:
        raise to_http_exception(e)


@router.put("/matches/{match_id}/score", response_model=MatchModel, summary="Enter Match Score")
async def set_match_score(
    payload: ScoreEntryRequest,
    match_id: str = Path(..., description="The ID of the match"),
    service: TournamentService = Depends(get_tournament_service),
):
    """
    Sets the score of one side of a match that is not yet confirmed.

    - **slot**: 1 or 2, the side whose score is entered. The slot must have a team.
    - **value**: the score; non-numeric input becomes 0 and negatives become 0.
    """
    try:
        return service.set_score(match_id, payload.slot, payload.value)
    except TournamentError as e:
        raise to_http_exception(e)


@router.post("/matches/{match_id}/confirm", response_model=ConfirmationResponse, summary="Confirm Match Result")
async def confirm_match_result(
    match_id: str = Path(..., description="The ID of the match"),
    service: TournamentService = Depends(get_tournament_service),
):
    """
    Confirms a match: the higher score wins, the match is frozen and the winner
    moves into its slot of the next match. Draws are rejected; settle them with
    a tie-break and enter distinct scores.
    """
    try:
        confirmation = service.confirm_result(match_id)
    except TournamentError as e:
        raise to_http_exception(e)
    return ConfirmationResponse(
        match=confirmation.match,
        next_match=confirmation.next_match,
        champion_id=confirmation.champion_id,
    )


@router.get("/export", summary="Export Tournament as JSON")
async def export_tournament(service: TournamentService = Depends(get_tournament_service)):
    """Downloads the tournament as a JSON document named after today's date."""
    filename, content = service.export_data()
    return Response(
        content=content,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import", response_model=TournamentState, summary="Import Tournament from JSON")
async def import_tournament(request: Request, service: TournamentService = Depends(get_tournament_service)):
    """
    Loads a previously exported document sent as the raw request body.
    Only `teams`, `matches` and `isTournamentStarted` present in the document
    are replaced. A malformed document is rejected and nothing changes.
    """
    raw = await request.body()
    try:
        return service.import_data(raw)
    except TournamentError as e:
        raise to_http_exception(e)


@router.post("/reset", response_model=TournamentState, summary="Reset Tournament")
async def reset_tournament(service: TournamentService = Depends(get_tournament_service)):
    """Restores the default 7-team roster, drops the bracket and clears saved data."""
    return service.reset()
