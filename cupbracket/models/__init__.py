# Re-export the models so callers can import them from one place
from .bracket_model import BracketModel, MatchModel, MatchSlot, MatchState, ROUND_NAMES
from .team_model import PlayerModel, TeamModel, default_teams
from .tournament_model import TournamentState, STATE_VERSION
