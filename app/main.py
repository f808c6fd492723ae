import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.concurrency import run_in_threadpool
from starlette.responses import JSONResponse, Response

from .handler import ReplyHandler
from .metrics import REQUESTS, LATENCY
from .schemas import HandlerResponse, HealthResponse
from .settings import settings, mask_secret

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger("reply-generator")

# Every method reaches the handler; it answers OPTIONS and 405s the rest itself.
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

reply_handler = ReplyHandler.from_settings(settings)


def get_reply_handler() -> ReplyHandler:
    return reply_handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting reply generator (model=%s)", settings.GEMINI_MODEL)
    logger.info("GEMINI_API_KEY: %s", mask_secret(settings.GEMINI_API_KEY) or "not set")
    yield
    logger.info("Shutting down reply generator")


app = FastAPI(title="Review Reply Generator", version="1.0.0", lifespan=lifespan)


def to_response(result: HandlerResponse) -> Response:
    if result.body is None:
        return Response(status_code=result.status_code, headers=result.headers)
    return JSONResponse(result.body, status_code=result.status_code, headers=result.headers)


@app.get("/healthz", response_model=HealthResponse)
def healthz(handler: ReplyHandler = Depends(get_reply_handler)):
    return HealthResponse(status="ok", configured=handler.configured)

@app.get("/metrics")
def metrics():
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)

@app.api_route("/", methods=ALL_METHODS, include_in_schema=False)
@app.api_route("/generate", methods=ALL_METHODS)
async def generate(request: Request, handler: ReplyHandler = Depends(get_reply_handler)):
    start = time.time()
    body = await request.body()
    result = await run_in_threadpool(handler.handle, request.method, body)
    REQUESTS.labels(request.url.path, str(result.status_code)).inc()
    LATENCY.observe(time.time() - start)
    return to_response(result)


def run() -> None:
    import uvicorn

    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
