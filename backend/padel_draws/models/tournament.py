from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from padel_draws.models.match import TournamentMatch
    from padel_draws.models.pool import TournamentPool
    from padel_draws.models.registration import TournamentRegistration


class Tournament(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    club_id: Optional[str] = Field(default=None, index=True)
    name: str
    category: Optional[str] = None  # e.g. "MD100", "WD500", "MXOPEN"
    tournament_type: str  # see draw_rules.TournamentType
    status: str = Field(default="draft")  # see draw_rules.TournamentStatus
    match_format: str = Field(default="B1")
    pool_format: Optional[str] = Field(default=None)  # pool match format, defaults to D1 at draw time

    start_date: Optional[datetime] = Field(default=None)
    available_courts: Optional[List[int]] = Field(default=None, sa_column=Column(JSON))
    match_duration_minutes: int = Field(default=90)
    draw_publication_date: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    registrations: List["TournamentRegistration"] = Relationship(back_populates="tournament")
    pools: List["TournamentPool"] = Relationship(back_populates="tournament")
    matches: List["TournamentMatch"] = Relationship(back_populates="tournament")
