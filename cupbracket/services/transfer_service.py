import json
from datetime import date
from typing import Optional, Tuple, Union

from pydantic import ValidationError

from cupbracket.core.config import settings
from cupbracket.core.exceptions import BracketIntegrityError, MalformedImport
from cupbracket.models.tournament_model import TournamentState
from cupbracket.services.bracket_service import validate_bracket

_STARTED_KEYS = ("isTournamentStarted", "tournamentStarted")


def export_filename(today: Optional[date] = None, prefix: str = settings.EXPORT_FILENAME_PREFIX) -> str:
    today = today or date.today()
    return f"{prefix}_{today.isoformat()}.json"


def export_document(state: TournamentState, today: Optional[date] = None) -> Tuple[str, str]:
    """Returns ``(filename, json_text)`` for a downloadable copy of the tournament."""
    document = state.to_document()
    payload = {
        "teams": document["teams"],
        "matches": document["matches"],
        "isTournamentStarted": document["isTournamentStarted"],
    }
    return export_filename(today), json.dumps(payload, indent=2, ensure_ascii=False)


def import_document(state: TournamentState, raw: Union[str, bytes]) -> TournamentState:
    """
    Applies an exported document on top of ``state``.

    Only the fields present in the document replace the current ones. Raises
    MalformedImport, leaving ``state`` untouched, if the text is not a JSON
    object, a present field has the wrong shape, or the result would be a
    bracket that contradicts itself or the roster.
    """
    try:
        document = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedImport(f"Import file is not valid JSON: {e}") from e
    if not isinstance(document, dict):
        raise MalformedImport("Import file must contain a JSON object.")

    candidate = state.to_document()
    if "teams" in document:
        candidate["teams"] = document["teams"]
    if "matches" in document:
        candidate["matches"] = document["matches"]
    started_key = next((key for key in _STARTED_KEYS if key in document), None)
    if started_key is not None:
        started = document[started_key]
        if not isinstance(started, bool):
            raise MalformedImport(f"'{started_key}' must be true or false.")
        candidate["isTournamentStarted"] = started

    try:
        new_state = TournamentState.model_validate(candidate)
    except ValidationError as e:
        raise MalformedImport(f"Import file has an unexpected shape: {e.error_count()} error(s).") from e

    if new_state.tournament_started != bool(new_state.matches):
        raise MalformedImport(
            "Imported tournament is inconsistent: 'isTournamentStarted' must be true exactly when matches exist."
        )

    if new_state.matches:
        try:
            validate_bracket(new_state.matches)
        except BracketIntegrityError as e:
            raise MalformedImport(f"Imported bracket is inconsistent: {e}") from e
        _check_team_references(new_state)
    return new_state


def _check_team_references(state: TournamentState):
    team_ids = {team.id for team in state.teams}
    for match in state.matches:
        for team_id in (match.team1_id, match.team2_id, match.winner_id):
            if team_id is not None and team_id not in team_ids:
                raise MalformedImport(
                    f"Imported bracket is inconsistent: match '{match.id}' refers to unknown team '{team_id}'."
                )
