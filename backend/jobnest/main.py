from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobnest import models  # noqa: F401
from jobnest.api import (
    applications,
    companies,
    company_admin,
    favorites,
    interests,
    jobs,
    notifications,
    profiles,
    skills,
    uploads,
    users,
)
from jobnest.bootstrap import run_runtime_migrations
from jobnest.config import Settings, settings
from jobnest.database import Base, engine
from jobnest.errors import register_exception_handlers
from jobnest.logging_config import setup_logging


setup_logging(settings.log_level, settings.log_file)
logger = logging.getLogger(__name__)


def check_settings(config: Settings) -> None:
    missing = config.missing_required()
    for name in missing:
        logger.warning("Missing required setting: %s", name)
    if missing and config.is_production():
        raise RuntimeError(f"Missing required settings: {', '.join(missing)}")


app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)


@app.on_event("startup")
def on_startup() -> None:
    check_settings(settings)
    settings.ensure_directories()
    Base.metadata.create_all(bind=engine)
    added = run_runtime_migrations(engine)
    if added:
        logger.info("Runtime migrations added %s", ", ".join(added))
    logger.info("%s started (%s)", settings.app_name, settings.environment)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(jobs.router, prefix="/api/jobs", tags=["jobs"])
app.include_router(companies.router, prefix="/api/companies", tags=["companies"])
app.include_router(company_admin.router, prefix="/api/company-admin", tags=["company_admin"])
app.include_router(applications.router, prefix="/api/applications", tags=["applications"])
app.include_router(favorites.router, prefix="/api/favorite", tags=["favorites"])
app.include_router(notifications.router, prefix="/api/notification", tags=["notifications"])
app.include_router(profiles.router, prefix="/api/profile", tags=["profiles"])
app.include_router(skills.router, prefix="/api/skill", tags=["skills"])
app.include_router(interests.router, prefix="/api/interest", tags=["interests"])
app.include_router(uploads.router, prefix="/api/upload", tags=["uploads"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("jobnest.main:app", host="0.0.0.0", port=settings.port)
