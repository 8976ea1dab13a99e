"""
Periodic platform statistics in the service log
"""
import asyncio
import logging

from lifecycle import ChatCoordinator

logger = logging.getLogger(__name__)


def log_platform_stats(chat_coordinator: ChatCoordinator) -> dict:
    stats = chat_coordinator.stats()
    logger.info(
        "Platform stats: connected=%d waiting=%d active_chats=%d",
        stats["connected_count"], stats["waiting_count"], stats["active_chats"],
    )
    return stats


async def run_stats_reporter(chat_coordinator: ChatCoordinator, interval_sec: float):
    """Log stats every interval_sec until cancelled"""
    while True:
        await asyncio.sleep(interval_sec)
        log_platform_stats(chat_coordinator)
