"""Active game registry: the set of monitored game keys plus their last state."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import redis
from pydantic import ValidationError

from goalfeed.schemas import Game

logger = logging.getLogger(__name__)

ACTIVE_GAMES_KEY = "active_games"
GAME_KEY_PREFIX = "game:"
DEFAULT_GAME_TTL_SECONDS = 24 * 60 * 60


class GameNotFound(KeyError):
    pass


class RegistryError(RuntimeError):
    pass


class ActiveGameRegistry(ABC):
    @abstractmethod
    def get_active_game_keys(self) -> set[str]:
        ...

    @abstractmethod
    def get_game(self, game_key: str) -> Game:
        """Return the stored game. Raises GameNotFound for stale keys."""

    @abstractmethod
    def set_game(self, game: Game) -> None:
        ...

    @abstractmethod
    def append_active_game(self, game: Game) -> None:
        ...

    @abstractmethod
    def delete_active_game_key(self, game_key: str) -> None:
        ...

    def delete_active_game(self, game: Game) -> None:
        self.delete_active_game_key(game.game_key)


def _decode(value: bytes | str) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class RedisActiveGameRegistry(ActiveGameRegistry):
    """Registry stored in Redis.

    Game state lives at `game:{game_key}` as JSON with a TTL; the active set is
    the Redis set `active_games`. Every write is a full-value overwrite.
    """

    def __init__(self, client: redis.Redis, *, game_ttl_seconds: int = DEFAULT_GAME_TTL_SECONDS) -> None:
        self.client = client
        self.game_ttl_seconds = game_ttl_seconds

    def get_active_game_keys(self) -> set[str]:
        try:
            members = self.client.smembers(ACTIVE_GAMES_KEY)
        except redis.RedisError as exc:
            raise RegistryError(f"Failed reading active games: {exc}") from exc
        return {_decode(member) for member in members}

    def get_game(self, game_key: str) -> Game:
        try:
            raw = self.client.get(f"{GAME_KEY_PREFIX}{game_key}")
        except redis.RedisError as exc:
            raise RegistryError(f"Failed reading game {game_key}: {exc}") from exc
        if raw is None:
            raise GameNotFound(game_key)
        try:
            return Game.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Stored game %s is corrupt: %s", game_key, exc)
            raise GameNotFound(game_key) from exc

    def set_game(self, game: Game) -> None:
        try:
            self.client.set(
                f"{GAME_KEY_PREFIX}{game.game_key}",
                game.model_dump_json(),
                ex=self.game_ttl_seconds,
            )
        except redis.RedisError as exc:
            raise RegistryError(f"Failed writing game {game.game_key}: {exc}") from exc

    def append_active_game(self, game: Game) -> None:
        try:
            self.client.sadd(ACTIVE_GAMES_KEY, game.game_key)
        except redis.RedisError as exc:
            raise RegistryError(f"Failed adding active game {game.game_key}: {exc}") from exc

    def delete_active_game_key(self, game_key: str) -> None:
        try:
            self.client.srem(ACTIVE_GAMES_KEY, game_key)
        except redis.RedisError as exc:
            raise RegistryError(f"Failed removing active game {game_key}: {exc}") from exc
