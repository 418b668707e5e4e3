import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.logging import setup_logging

setup_logging(settings.LOG_LEVEL)

# Import models first to ensure they're registered
from app.models.user import User, AuthSession
from app.models.project import Project, ProjectMember, ProjectMilestone
from app.models.task import Task, TaskComment, Subtask

# Import database
from app.db.base import engine, Base, SessionLocal

# Import routers
from app.api.v1 import advanced, auth, calculator, dates, projects, strings, tasks, users
from app.services.auth_service import AuthService

logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    description="Project and task management API with teams, comments, subtasks and analytics",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
for module in (auth, users, projects, tasks, strings, calculator, dates, advanced):
    app.include_router(module.router, prefix="/api")

@app.on_event("startup")
def ensure_admin_user():
    """Create the bootstrap admin when ADMIN_EMAIL and ADMIN_PASSWORD are configured"""
    if not (settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD):
        return

    db = SessionLocal()
    try:
        AuthService(db).ensure_admin(settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
    finally:
        db.close()

@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": settings.APP_NAME,
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc"
    }

@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "project-task-api"}

if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting {settings.APP_NAME}")
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
