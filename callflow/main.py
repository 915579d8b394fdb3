"""Main FastAPI application."""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from callflow.config import config
from callflow.exceptions import CallFlowError, PayloadValidationError
from callflow.health import router as health_router
from callflow.logging_config import logger
from callflow.metrics import agent_requests_total
from callflow.routers.agent import router as agent_router
from callflow.routers.core import router as core_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    logger.info("application_starting", version="1.0.0")
    logger.info("openai_configured", configured=config.has_openai_key(), model=config.OPENAI_MODEL)

    yield

    logger.info("application_shutting_down")


app = FastAPI(
    title="CallFlow API",
    description="Call-operations dashboard completion proxy",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Schema failures and malformed JSON become a 400 with a generic message."""
    fields = [".".join(str(part) for part in error.get("loc", ())) for error in exc.errors()]
    logger.warning("agent_request_invalid", path=request.url.path, fields=fields)
    agent_requests_total.labels(outcome=PayloadValidationError.__name__).inc()
    error = PayloadValidationError(fields=fields)
    return JSONResponse(status_code=error.status_code, content={"error": error.message})


@app.exception_handler(CallFlowError)
async def callflow_exception_handler(request: Request, exc: CallFlowError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


app.include_router(core_router)
app.include_router(health_router)
app.include_router(agent_router)
