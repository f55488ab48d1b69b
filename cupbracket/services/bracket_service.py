import math
import random
import re
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel

from cupbracket.core.exceptions import (
    BracketIntegrityError,
    DuplicateTeam,
    EmptySlot,
    IncompleteScore,
    InvalidRosterSize,
    InvalidScore,
    MatchFrozen,
    MatchNotFound,
    TiedScore,
    TournamentAlreadyStarted,
)
from cupbracket.models.bracket_model import (
    BracketModel,
    MatchModel,
    MatchSlot,
    QUARTERFINAL_IDS,
    SEMIFINAL_IDS,
    FINAL_ID,
)
from cupbracket.models.team_model import TeamModel
from cupbracket.models.tournament_model import TournamentState

BRACKET_TEAM_COUNT = 7
MATCHES_PER_ROUND = {1: 3, 2: 2, 3: 1}

# Where each match's winner goes: match id -> (successor id, slot in successor)
WINNER_ROUTES = {
    QUARTERFINAL_IDS[0]: (SEMIFINAL_IDS[0], MatchSlot.TEAM1),
    QUARTERFINAL_IDS[1]: (SEMIFINAL_IDS[0], MatchSlot.TEAM2),
    QUARTERFINAL_IDS[2]: (SEMIFINAL_IDS[1], MatchSlot.TEAM1),
    SEMIFINAL_IDS[0]: (FINAL_ID, MatchSlot.TEAM1),
    SEMIFINAL_IDS[1]: (FINAL_ID, MatchSlot.TEAM2),
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class Confirmation(BaseModel):
    """Outcome of confirming one match result."""
    state: TournamentState
    match: MatchModel
    next_match: Optional[MatchModel] = None
    champion_id: Optional[str] = None


def build_bracket(teams: Sequence[TeamModel], rng: Optional[random.Random] = None) -> List[MatchModel]:
    """
    Seeds the fixed 7-team bracket.

    The roster is shuffled (Fisher-Yates through ``random.shuffle``), then
    positions 0v1, 2v3 and 4v5 become the three quarterfinals. Position 6 gets
    the bye and is written straight into the second slot of semifinal B.
    Returns all six matches at once; nothing is built if the roster is invalid.
    """
    if len(teams) != BRACKET_TEAM_COUNT:
        raise InvalidRosterSize(len(teams), BRACKET_TEAM_COUNT)

    team_ids = [team.id for team in teams]
    duplicates = [team_id for team_id, count in Counter(team_ids).items() if count > 1]
    if duplicates:
        raise DuplicateTeam(f"Team ids must be unique, repeated: {', '.join(duplicates)}.")

    if rng is not None:
        rng.shuffle(team_ids)
    else:
        random.shuffle(team_ids)

    matches: List[MatchModel] = []

    for index, match_id in enumerate(QUARTERFINAL_IDS):
        next_match_id, slot = WINNER_ROUTES[match_id]
        matches.append(MatchModel(
            id=match_id,
            round=1,
            team1_id=team_ids[2 * index],
            team2_id=team_ids[2 * index + 1],
            score1=0, # Numeric inputs start at zero in the first round
            score2=0,
            next_match_id=next_match_id,
            slot_in_next_match=slot,
        ))

    for match_id in SEMIFINAL_IDS:
        next_match_id, slot = WINNER_ROUTES[match_id]
        matches.append(MatchModel(
            id=match_id,
            round=2,
            next_match_id=next_match_id,
            slot_in_next_match=slot,
        ))

    # The bye team waits in semifinal B
    matches[-1].team2_id = team_ids[6]

    matches.append(MatchModel(id=FINAL_ID, round=3))
    return matches


def validate_bracket(matches: Sequence[MatchModel]) -> None:
    """Raises BracketIntegrityError if the match graph breaks a structural invariant."""
    by_id: Dict[str, MatchModel] = {}
    for match in matches:
        if match.id in by_id:
            raise BracketIntegrityError(f"Duplicate match id '{match.id}'.")
        by_id[match.id] = match

    per_round = Counter(match.round for match in matches)
    if dict(per_round) != MATCHES_PER_ROUND:
        raise BracketIntegrityError(
            f"Expected matches per round {MATCHES_PER_ROUND}, found {dict(per_round)}."
        )

    fed_slots = set()
    for match in matches:
        if (match.next_match_id is None) != (match.slot_in_next_match is None):
            raise BracketIntegrityError(
                f"Match '{match.id}' must set both next_match_id and slot_in_next_match, or neither."
            )
        if match.next_match_id is None:
            if match.round != 3:
                raise BracketIntegrityError(f"Match '{match.id}' in round {match.round} has no successor.")
        else:
            successor = by_id.get(match.next_match_id)
            if successor is None:
                raise BracketIntegrityError(
                    f"Match '{match.id}' points to unknown match '{match.next_match_id}'."
                )
            if successor.round <= match.round:
                raise BracketIntegrityError(
                    f"Match '{match.id}' (round {match.round}) feeds '{successor.id}' (round {successor.round})."
                )
            target = (successor.id, MatchSlot(match.slot_in_next_match))
            if target in fed_slots:
                raise BracketIntegrityError(
                    f"Two matches feed slot '{target[1].value}' of match '{successor.id}'."
                )
            fed_slots.add(target)

        if match.winner_id is not None and match.winner_id not in (match.team1_id, match.team2_id):
            raise BracketIntegrityError(
                f"Winner '{match.winner_id}' of match '{match.id}' did not play in it."
            )


def generate_bracket(state: TournamentState, rng: Optional[random.Random] = None) -> TournamentState:
    if state.tournament_started:
        raise TournamentAlreadyStarted("The bracket has already been generated. Reset the tournament first.")

    matches = build_bracket(state.teams, rng=rng)
    return state.model_copy(update={"matches": matches, "tournament_started": True}, deep=True)


def coerce_score(value: Any) -> int:
    """
    Turns raw score input into a non-negative integer.

    Integers pass through, floats are truncated and strings use their leading
    integer ("3 goals" -> 3). Anything else, including unparseable text, is 0.
    Negative values clamp to 0.
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        score = value
    elif isinstance(value, float):
        score = int(value) if math.isfinite(value) else 0
    elif isinstance(value, str):
        found = _LEADING_INT.match(value)
        score = int(found.group(1)) if found else 0
    else:
        score = 0
    return max(score, 0)


def _require_match(state: TournamentState, match_id: str) -> MatchModel:
    match = state.find_match(match_id)
    if match is None:
        raise MatchNotFound(f"Match with ID {match_id} not found.")
    return match


def set_score(state: TournamentState, match_id: str, slot: int, value: Any) -> TournamentState:
    """Records the score of one side of an unconfirmed match. No other match is touched."""
    try:
        match_slot = MatchSlot.from_number(slot)
    except ValueError as e:
        raise InvalidScore(str(e)) from e

    new_state = state.model_copy(deep=True)
    match = _require_match(new_state, match_id)

    if match.is_frozen:
        raise MatchFrozen(f"Match '{match_id}' is already confirmed; its score can no longer change.")
    if match.team_in(match_slot) is None:
        raise EmptySlot(f"Slot {slot} of match '{match_id}' has no team yet.")

    score = coerce_score(value)
    if match_slot == MatchSlot.TEAM1:
        match.score1 = score
    else:
        match.score2 = score
    return new_state


def confirm_result(state: TournamentState, match_id: str) -> Confirmation:
    """
    Freezes a match with its winner and advances the winner.

    The successor receives the winner in its designated slot and has its
    scores reset to 0-0 with no winner, even if scoring had already started
    there. Confirming the final crowns the champion and propagates nothing.
    The input state is never modified; on any error nothing changes.
    """
    new_state = state.model_copy(deep=True)
    match = _require_match(new_state, match_id)

    if match.is_frozen:
        raise MatchFrozen(f"Match '{match_id}' is already confirmed. Reset the tournament to change it.")
    if match.score1 is None or match.score2 is None:
        raise IncompleteScore(f"Both scores of match '{match_id}' must be entered before confirming.")
    if match.score1 == match.score2:
        raise TiedScore(
            f"Match '{match_id}' is tied {match.score1}-{match.score2}. "
            "Settle it with a tie-break (e.g. penalties) and enter distinct scores."
        )
    if not match.has_both_teams:
        raise EmptySlot(f"Match '{match_id}' does not have two teams assigned.")

    winner_id = match.team1_id if match.score1 > match.score2 else match.team2_id

    next_match = None
    if match.next_match_id:
        next_match = new_state.find_match(match.next_match_id)
        if next_match is None:
            raise BracketIntegrityError(
                f"Consistency error: next match {match.next_match_id} of '{match_id}' not found."
            )
        if next_match.is_frozen:
            raise BracketIntegrityError(
                f"Consistency error: next match {next_match.id} is already confirmed."
            )
        if match.slot_in_next_match is None:
            raise BracketIntegrityError(f"Match '{match_id}' has no slot in its next match.")

        if MatchSlot(match.slot_in_next_match) == MatchSlot.TEAM1:
            next_match.team1_id = winner_id
        else:
            next_match.team2_id = winner_id
        next_match.score1 = 0
        next_match.score2 = 0
        next_match.winner_id = None

    match.winner_id = winner_id

    return Confirmation(
        state=new_state,
        match=match,
        next_match=next_match,
        champion_id=None if match.next_match_id else winner_id,
    )


def bracket_view(state: TournamentState) -> BracketModel:
    rounds_structure: Dict[int, List[str]] = {}
    for match in sorted(state.matches, key=lambda m: m.round):
        rounds_structure.setdefault(match.round, []).append(match.id)

    return BracketModel(
        matches=state.matches,
        rounds_structure=rounds_structure,
        bye_team_id=state.bye_team_id,
        champion_id=state.champion_id,
    )
