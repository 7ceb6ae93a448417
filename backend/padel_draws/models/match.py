from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from padel_draws.models.pool import TournamentPool
    from padel_draws.models.tournament import Tournament


class TournamentMatch(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("tournament_id", "match_code", name="uq_tournament_match_code"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    pool_id: Optional[int] = Field(default=None, foreign_key="tournamentpool.id")
    match_code: str
    round_type: str  # see draw_rules.RoundType
    round_number: int = Field(default=1)
    match_order: int  # 1-based within round (within pool for pool matches)

    # Team assignments (nullable on one side for byes)
    team1_registration_id: Optional[int] = Field(default=None, foreign_key="tournamentregistration.id")
    team2_registration_id: Optional[int] = Field(default=None, foreign_key="tournamentregistration.id")
    winner_registration_id: Optional[int] = Field(default=None, foreign_key="tournamentregistration.id")
    is_bye: bool = Field(default=False)

    status: str = Field(default="scheduled")  # "scheduled" | "ready" | "in_progress" | "completed" | "cancelled" | "forfeit"

    # Filled by auto-scheduling
    court_number: Optional[int] = Field(default=None)
    scheduled_time: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="matches")
    pool: Optional["TournamentPool"] = Relationship(back_populates="matches")
