"""
REST API endpoints for the random chat service
"""
from lifecycle import coordinator
from models import StatsResponse


async def read_root():
    """Root endpoint"""
    return {"message": "Random chat service is running."}


async def health():
    return {"status": "ok"}


async def api_stats() -> StatsResponse:
    """Connected participants, waiting queue size and active chat count"""
    return StatsResponse(**coordinator.stats())
