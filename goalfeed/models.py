from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from .db import Base


class Goal(Base):
    __tablename__ = "goals"

    id = Column(Integer, primary_key=True, index=True)
    league_id = Column(Integer, nullable=False, index=True)
    league_name = Column(String, nullable=False, default="")
    team_code = Column(String, nullable=False, default="")
    team_name = Column(String, nullable=False, default="")
    team_hash = Column(String, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
