"""Append-only goal history."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from sqlalchemy.orm import sessionmaker

from goalfeed.db import Base, SessionLocal, engine
from goalfeed.models import Goal
from goalfeed.schemas import Team

logger = logging.getLogger(__name__)


class GoalStore(ABC):
    @abstractmethod
    def insert_goal(self, team: Team) -> None:
        ...


class SqlGoalStore(GoalStore):
    def __init__(self, session_factory: sessionmaker = SessionLocal) -> None:
        self.session_factory = session_factory

    def insert_goal(self, team: Team) -> None:
        with self.session_factory() as db:
            try:
                db.add(
                    Goal(
                        league_id=team.league_id,
                        league_name=team.league_name,
                        team_code=team.team_code,
                        team_name=team.team_name,
                        team_hash=team.team_hash,
                    )
                )
                db.commit()
            except Exception:
                db.rollback()
                raise
        logger.info("Recorded goal for %s (%s)", team.team_code, team.league_name)


def initialize_database() -> None:
    Base.metadata.create_all(bind=engine)
