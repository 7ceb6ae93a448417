# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from padel_draws.models.match import TournamentMatch  # noqa: F401
from padel_draws.models.pool import TournamentPool  # noqa: F401
from padel_draws.models.registration import TournamentRegistration  # noqa: F401
from padel_draws.models.tournament import Tournament  # noqa: F401
