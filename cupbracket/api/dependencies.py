from typing import Optional

from fastapi import HTTPException, status

from cupbracket.core.exceptions import (
    BracketIntegrityError,
    MatchFrozen,
    TournamentAlreadyStarted,
    TournamentError,
)
from cupbracket.services.tournament_service import TournamentService

_tournament_service: Optional[TournamentService] = None


def get_tournament_service() -> TournamentService:
    # One shared service: the tool has a single operator and a single state
    global _tournament_service
    if _tournament_service is None:
        _tournament_service = TournamentService()
    return _tournament_service


def to_http_exception(error: TournamentError) -> HTTPException:
    """Maps a core failure to the response the UI shows the operator."""
    if isinstance(error, LookupError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, (TournamentAlreadyStarted, MatchFrozen)):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, BracketIntegrityError):
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(
        status_code=code,
        detail={"error": type(error).__name__, "message": str(error)},
    )
