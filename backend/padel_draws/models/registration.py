from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from padel_draws.models.pool import TournamentPool
    from padel_draws.models.tournament import Tournament


class TournamentRegistration(SQLModel, table=True):
    __table_args__ = (
        # Seeds are unique within a tournament (where seed_number is not null)
        SAUniqueConstraint("tournament_id", "seed_number", name="uq_tournament_seed"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    player1_id: Optional[str] = None
    player2_id: Optional[str] = None

    # Ranking (lower = stronger). combined_rank overrides the player sum when set.
    player1_rank: Optional[int] = Field(default=None)
    player2_rank: Optional[int] = Field(default=None)
    combined_rank: Optional[int] = Field(default=None)

    registration_order: int = Field(default=0)
    status: str = Field(default="pending")  # "pending" | "confirmed" | "validated" | "waiting_list" | "rejected" | "withdrawn"

    # Written back when the draw is published
    is_seed: bool = Field(default=False)
    seed_number: Optional[int] = Field(default=None)
    pool_id: Optional[int] = Field(default=None, foreign_key="tournamentpool.id")
    phase: str = Field(default="waiting_list")  # "waiting_list" | "qualifications" | "main_draw" | "eliminated"

    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="registrations")
    pool: Optional["TournamentPool"] = Relationship(back_populates="registrations")
