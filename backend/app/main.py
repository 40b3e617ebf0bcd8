# Tutoring rules backend entrypoint: billing, makeup credits and scheduling.

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.app.core.errors import DomainError
from backend.app.core.settings import get_settings
from backend.app.api import billing
from backend.app.api import debug
from backend.app.api import lessons
from backend.app.api import makeup_credits
from backend.app.api import payments
from backend.app.api import schedule_requests
from backend.app.api import students
from backend.app.db.base import Base
from backend.app.db.session import engine

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version=settings.api_version)

origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(students.router)
app.include_router(schedule_requests.router)
app.include_router(lessons.router)
app.include_router(makeup_credits.router)
app.include_router(billing.router)
app.include_router(payments.router)
app.include_router(debug.router)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    http_exc = exc.to_http_exception()
    if http_exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s rejected (%s): %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


@app.get("/")
def read_root():
    return {"app": "Tutoring Rules backend", "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.on_event("startup")
def create_tables():
    Base.metadata.create_all(bind=engine)
