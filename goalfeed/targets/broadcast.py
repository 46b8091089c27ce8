"""Broadcast goal events to subscribers over Redis pub/sub."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import redis

from goalfeed.schemas import Event

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL = "goals"


class Broadcaster(ABC):
    @abstractmethod
    def send_event(self, event: Event) -> None:
        ...


class RedisBroadcaster(Broadcaster):
    def __init__(self, client: redis.Redis, channel: str = DEFAULT_CHANNEL) -> None:
        self.client = client
        self.channel = channel

    def send_event(self, event: Event) -> None:
        receivers = self.client.publish(self.channel, event.model_dump_json())
        logger.debug(
            "Published %s goal on channel=%s receivers=%s",
            event.team_code,
            self.channel,
            receivers,
        )
