"""
Window Cutting-List API
FastAPI wrapper around the stock-cutting optimizer: frame, shutter,
interlock and track-rail cutting plans for aluminium sliding-window sections.
"""
import logging
import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from cutlist.config import CORS_ORIGINS, LOG_JSON, LOG_LEVEL
from cutlist.services.logging_config import setup_logging
from cutlist.services.middleware import RequestTimingMiddleware
from cutlist.services.perf_monitor import tracker as perf_tracker

setup_logging(level=LOG_LEVEL, json_output=LOG_JSON)
logger = logging.getLogger("cutlist-api")

# Record process start time for uptime calculation
_PROCESS_START = time.monotonic()

app = FastAPI(
    title="Window Cutting-List API",
    version="1.0.0",
    description="Stock-bar cutting plans and wastage summaries for sliding window sections",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Accept", "X-Requested-With"],
)
# Request timing + X-Request-ID must be outermost so it wraps all other middleware
app.add_middleware(RequestTimingMiddleware)


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    logger.warning(f"Rejected request to {request.url.path}: {exc}")
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# Routers
from cutlist.api.calculation_routes import router as calculation_router

app.include_router(calculation_router)


@app.get("/health")
async def health_check():
    return {
        "status": "ok",
        "service": "window-cutlist",
        "uptime_s": round(time.monotonic() - _PROCESS_START, 1),
    }


@app.get("/metrics")
async def metrics():
    return perf_tracker.get_metrics()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("cutlist.main:app", host="0.0.0.0", port=8000, reload=True)
