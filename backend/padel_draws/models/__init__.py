from padel_draws.models.match import TournamentMatch
from padel_draws.models.pool import TournamentPool
from padel_draws.models.registration import TournamentRegistration
from padel_draws.models.tournament import Tournament

__all__ = [
    "Tournament",
    "TournamentRegistration",
    "TournamentPool",
    "TournamentMatch",
]
