"""
Random Chat Service - Main Application
Pairs anonymous participants and relays chat, call control and WebRTC signaling between them
"""
import asyncio
import logging
import uvicorn
from contextlib import asynccontextmanager
from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

# Import modules - using absolute imports for Docker compatibility
import sys
from pathlib import Path
sys.path.append(str(Path(__file__).parent))

import config
from api_endpoints import read_root, health, api_stats
from chat_websocket import websocket_chat_participant
from lifecycle import coordinator
from models import StatsResponse
from stats_reporter import run_stats_reporter

# --- Logging Setup ---
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(levelname)s - %(name)s - %(funcName)s - %(lineno)d - %(message)s",
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    stats_task = None
    if config.STATS_INTERVAL_SEC > 0:
        stats_task = asyncio.create_task(run_stats_reporter(coordinator, config.STATS_INTERVAL_SEC))
    try:
        yield
    finally:
        if stats_task:
            stats_task.cancel()
            await asyncio.gather(stats_task, return_exceptions=True)


# Create FastAPI app
app = FastAPI(title="Random Chat Service", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register HTTP endpoints
app.get("/")(read_root)
app.get("/health")(health)
app.get("/api/stats", response_model=StatsResponse)(api_stats)


# Register WebSocket endpoints
@app.websocket("/ws/chat")
async def ws_chat(websocket: WebSocket):
    await websocket_chat_participant(websocket)


if __name__ == "__main__":
    logger.info(f"Starting Random Chat Service on host {config.HOST}, port {config.PORT}")
    uvicorn.run(app, host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())
