# backend/main.py

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings
from core.logging import setup_logging, get_logger
from core.state import AppState
from api.routes import root, health, metrics, rooms, users
from api import websocket as websocket_module

# Configure logging first
setup_logging()
logger = get_logger(__name__)

# FastAPI app
app = FastAPI(title="Chat Messaging Core")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# REST routes
app.include_router(root.router)
app.include_router(health.router)
app.include_router(metrics.router)
app.include_router(rooms.router)
app.include_router(users.router)

# WebSocket routes
app.include_router(websocket_module.router)


@app.on_event("startup")
async def startup_event():
    # tests install their own state before the app starts
    if getattr(app.state, "chat", None) is None:
        app.state.chat = AppState.from_settings(settings)
        await app.state.chat.start()
    logger.info("🚀 Application starting - queue backend: %s", settings.PUB_SUB_SERVICE)


@app.on_event("shutdown")
async def on_shutdown():
    await app.state.chat.close()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000)
