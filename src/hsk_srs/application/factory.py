"""
Scheduler Factory
Centralizes the logic for selecting storage adapters.
"""

import logging

from hsk_srs.application.config import AppConfig
from hsk_srs.application.service import SchedulerService
from hsk_srs.domain.cards.ports import CardStore, Clock, LookupCounter
from hsk_srs.infrastructure.adapters.json_store import JsonCardStore, JsonLookupCounter
from hsk_srs.infrastructure.adapters.memory import InMemoryCardStore, InMemoryLookupCounter

logger = logging.getLogger(__name__)


def get_card_store(config: AppConfig) -> CardStore:
    """
    Returns the CardStore implementation selected by config.backend.
    """
    if config.backend == "memory":
        return InMemoryCardStore()
    logger.debug(f"Card store: {config.cards_path}")
    return JsonCardStore(config.cards_path)


def get_lookup_counter(config: AppConfig) -> LookupCounter:
    if config.backend == "memory":
        return InMemoryLookupCounter()
    return JsonLookupCounter(config.lookups_path)


def build_service(config: AppConfig, clock: Clock | None = None) -> SchedulerService:
    return SchedulerService(
        store=get_card_store(config),
        lookups=get_lookup_counter(config),
        clock=clock,
        friction_threshold=config.friction_lookup_threshold,
        strict_levels=config.strict_levels,
    )
