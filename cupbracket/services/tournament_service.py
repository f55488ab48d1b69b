import logging
import random
from datetime import date
from typing import Any, Optional, Tuple, Union

from cupbracket.core.config import settings
from cupbracket.models.bracket_model import BracketModel, MatchModel
from cupbracket.models.tournament_model import TournamentState
from cupbracket.services import bracket_service, team_service, transfer_service
from cupbracket.services.bracket_service import Confirmation
from cupbracket.services.storage_service import TournamentStore

logger = logging.getLogger(__name__)


class TournamentService:
    """
    Owns the single in-memory tournament and persists it after every change.

    Each public method is one user intent. The state transitions themselves are
    pure functions in the bracket, team and transfer services; this class only
    swaps in their result and writes it through to the store.
    """

    def __init__(self, store: Optional[TournamentStore] = None, rng: Optional[random.Random] = None):
        self.store = store or TournamentStore()
        if rng is None and settings.BRACKET_SEED is not None:
            rng = random.Random(settings.BRACKET_SEED)
        self.rng = rng
        self.state = self.store.load()

    def _commit(self, new_state: TournamentState) -> TournamentState:
        self.state = new_state
        try:
            self.store.save(new_state)
        except OSError as e:
            # The change stands in memory; the next successful save catches the file up
            logger.warning("Could not save tournament to %s: %s", self.store.data_file_path, e)
        return new_state

    def get_state(self) -> TournamentState:
        return self.state

    def get_bracket(self) -> BracketModel:
        return bracket_service.bracket_view(self.state)

    # --- Bracket ---

    def generate_bracket(self) -> BracketModel:
        self._commit(bracket_service.generate_bracket(self.state, rng=self.rng))
        logger.info("Bracket generated, bye team: %s", self.state.bye_team_id)
        return self.get_bracket()

    def set_score(self, match_id: str, slot: int, value: Any) -> MatchModel:
        self._commit(bracket_service.set_score(self.state, match_id, slot, value))
        return self.state.find_match(match_id)

    def confirm_result(self, match_id: str) -> Confirmation:
        confirmation = bracket_service.confirm_result(self.state, match_id)
        self._commit(confirmation.state)
        logger.info(
            "Match %s confirmed %s-%s, winner %s",
            match_id, confirmation.match.score1, confirmation.match.score2, confirmation.match.winner_id,
        )
        if confirmation.champion_id:
            logger.info("Tournament finished, champion: %s", confirmation.champion_id)
        return confirmation

    # --- Teams ---

    def add_team(self, name: str, logo: Optional[str] = None) -> TournamentState:
        return self._commit(team_service.add_team(self.state, name, logo))

    def update_team(self, team_id: str, name: Optional[str] = None, logo: Optional[str] = None) -> TournamentState:
        return self._commit(team_service.update_team(self.state, team_id, name=name, logo=logo))

    def remove_team(self, team_id: str) -> TournamentState:
        return self._commit(team_service.remove_team(self.state, team_id))

    def add_player(
        self,
        team_id: str,
        name: str,
        number: Optional[str] = None,
        position: Optional[str] = None,
    ) -> TournamentState:
        return self._commit(team_service.add_player(self.state, team_id, name, number, position))

    def remove_player(self, team_id: str, player_id: str) -> TournamentState:
        return self._commit(team_service.remove_player(self.state, team_id, player_id))

    # --- Export / import / reset ---

    def export_data(self, today: Optional[date] = None) -> Tuple[str, str]:
        return transfer_service.export_document(self.state, today=today)

    def import_data(self, raw: Union[str, bytes]) -> TournamentState:
        new_state = transfer_service.import_document(self.state, raw)
        logger.info(
            "Imported tournament: %d teams, %d matches, started=%s",
            len(new_state.teams), len(new_state.matches), new_state.tournament_started,
        )
        return self._commit(new_state)

    def reset(self) -> TournamentState:
        """Back to the default roster with no bracket, and forget the stored copy."""
        self.state = TournamentState()
        try:
            self.store.clear()
        except OSError as e:
            logger.warning("Could not clear saved tournament in %s: %s", self.store.data_file_path, e)
        logger.info("Tournament reset to defaults")
        return self.state
