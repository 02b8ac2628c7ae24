import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from medlist.api.routes_parse import router as parse_router
from medlist.core.logging_config import setup_logging
from medlist.core.server_config import CORS_ORIGINS, HOST, PORT
from medlist.services.vision import build_vision_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    # one client for the whole process, shared read-only by every request
    app.state.vision_client = build_vision_client()
    logger.info("Med List Parser ready (provider=%s)", app.state.vision_client.name)
    try:
        yield
    finally:
        await app.state.vision_client.aclose()


app = FastAPI(title="Med List Parser", version="1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(parse_router)


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=exc.headers,
    )


@app.get("/health")
def health():
    return {"ok": True}


@app.get("/")
def root():
    return {"ok": True, "service": "Med List Parser"}


if __name__ == "__main__":
    uvicorn.run("medlist.main:app", host=HOST, port=PORT)
