import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from educenter.api.routes import (
    auth,
    branches,
    categories,
    courses,
    enrollments,
    groups,
    health,
    rooms,
    students,
    teachers,
    users,
)
from educenter.core.config import get_settings
from educenter.core.exceptions import AppError
from educenter.core.middleware import AccessLogMiddleware, RequestSizeLimitMiddleware, SecurityHeadersMiddleware
from educenter.db.bootstrap import bootstrap

settings = get_settings()
logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.auto_create_schema:
        bootstrap()
    yield


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_payload(),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": str(error.get("msg", "")),
            "type": str(error.get("type", "")),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"message": "Validation failed", "details": {"errors": errors}},
    )


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)

app.add_middleware(AccessLogMiddleware)
app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(SecurityHeadersMiddleware, settings=settings)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(auth.router, prefix=f"{settings.api_prefix}/auth", tags=["auth"])
app.include_router(users.router, prefix=f"{settings.api_prefix}/users", tags=["users"])
app.include_router(branches.router, prefix=f"{settings.api_prefix}/branches", tags=["branches"])
app.include_router(categories.router, prefix=f"{settings.api_prefix}/course-categories", tags=["course-categories"])
app.include_router(courses.router, prefix=f"{settings.api_prefix}/courses", tags=["courses"])
app.include_router(rooms.router, prefix=f"{settings.api_prefix}/rooms", tags=["rooms"])
app.include_router(teachers.router, prefix=f"{settings.api_prefix}/teachers", tags=["teachers"])
app.include_router(students.router, prefix=f"{settings.api_prefix}/students", tags=["students"])
app.include_router(enrollments.router, prefix=f"{settings.api_prefix}/student-groups", tags=["student-groups"])
app.include_router(groups.router, prefix=f"{settings.api_prefix}/groups", tags=["groups"])
