import logging
from fastapi import FastAPI
from tasklist.core.config import settings
from tasklist.core.database import engine, Base
from tasklist.routers import health, auth, tasks, categories, dashboard, announcements, feedback

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

# Init DB
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Master Tasklist API",
    version="1.0.0"
)

# Routes
app.include_router(health.router, prefix="/health")
app.include_router(auth.router)
app.include_router(tasks.router)
app.include_router(categories.router)
app.include_router(dashboard.router)
app.include_router(announcements.router)
app.include_router(announcements.admin_router)
app.include_router(feedback.router)
