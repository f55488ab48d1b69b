class TournamentError(Exception):
    """Base class for every failure raised by the tournament core."""


class InvalidRosterSize(TournamentError, ValueError):
    def __init__(self, team_count: int, required: int = 7):
        self.team_count = team_count
        self.required = required
        super().__init__(
            f"A bracket needs exactly {required} teams, the roster has {team_count}."
        )


class DuplicateTeam(TournamentError, ValueError):
    pass


class TournamentAlreadyStarted(TournamentError, ValueError):
    pass


class IncompleteScore(TournamentError, ValueError):
    pass


class TiedScore(TournamentError, ValueError):
    pass


class InvalidScore(TournamentError, ValueError):
    pass


class EmptySlot(TournamentError, ValueError):
    pass


class MatchFrozen(TournamentError, ValueError):
    pass


class MalformedImport(TournamentError, ValueError):
    pass


class MatchNotFound(TournamentError, LookupError):
    pass


class TeamNotFound(TournamentError, LookupError):
    pass


class PlayerNotFound(TournamentError, LookupError):
    pass


class BracketIntegrityError(TournamentError, RuntimeError):
    """The stored match graph contradicts itself (dangling or frozen successor)."""
