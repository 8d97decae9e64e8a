import time
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

# Load environment variables from .env file before anything else
load_dotenv()

from app.core.config import settings
from app.core.logging import setup_logging, request_id_ctx
from app.api.router import api_router
from app.core.db import init_models, SessionLocal
import asyncio
import logging

from app.modules.realtime.broker import Broker
from app.modules.realtime.listener import run_change_feed_listener
from app.modules.processes.gate import ProcessGate
from app.modules.maintenance.service import run_maintenance_timer
from app.platform.provider_registry import registry


setup_logging()
app = FastAPI(title=settings.APP_NAME)
app.state.broker = Broker(buffer_size=settings.BROKER_BUFFER_SIZE)
app.state.process_gate = ProcessGate(SessionLocal)

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id", "-")
    request_id_ctx.set(rid)
    response = await call_next(request)
    return response


logger = logging.getLogger(__name__)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)

    process_time = (time.time() - start_time) * 1000
    formatted_process_time = f"{process_time:.2f}ms"

    logger.info(
        f"Request: {request.method} {request.url.path} - Response: {response.status_code} - Time: {formatted_process_time}"
    )

    return response

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.critical(f"Unhandled exception for request {request.method} {request.url.path}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "An internal server error occurred."},
    )


@app.on_event("startup")
async def on_startup():
    await init_models()
    await app.state.process_gate.load()
    tasks = [asyncio.create_task(run_maintenance_timer(SessionLocal, settings.MAINTENANCE_TIME))]
    feed = registry.change_feed()
    if feed is not None:
        tasks.append(asyncio.create_task(
            run_change_feed_listener(feed, app.state.broker, settings.CHANGE_FEED_RETRY_SECONDS)
        ))
    else:
        logger.warning("CHANGE_FEED_PROVIDER=none; live boards only see in-process events")
    app.state.background_tasks = tasks

@app.on_event("shutdown")
async def on_shutdown():
    for task in getattr(app.state, "background_tasks", []):
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("Background task failed during shutdown")


app.include_router(api_router, prefix=settings.API_PREFIX)
