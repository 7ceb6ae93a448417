from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from padel_draws.models.match import TournamentMatch
    from padel_draws.models.registration import TournamentRegistration
    from padel_draws.models.tournament import Tournament


class TournamentPool(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("tournament_id", "pool_number", name="uq_tournament_pool"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    pool_number: int
    pool_type: str = Field(default="main_draw")  # "qualification" | "main_draw"
    num_teams: int
    format: str = Field(default="D1")
    status: str = Field(default="pending")  # "pending" | "in_progress" | "completed"
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="pools")
    registrations: List["TournamentRegistration"] = Relationship(back_populates="pool")
    matches: List["TournamentMatch"] = Relationship(back_populates="pool")
