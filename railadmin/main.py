import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from railadmin.config import settings
from railadmin.database import init_db
from railadmin.auth import router as auth_router
from railadmin.stations import router as stations_router
from railadmin.staff import router as staff_router
from railadmin.trains import router as trains_router
from railadmin.tickets import router as tickets_router
from railadmin.reports import router as reports_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s: %(message)s"
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("%s started (%s)", settings.PROJECT_NAME, settings.ENVIRONMENT)
    yield

# Create FastAPI app
app = FastAPI(
    lifespan=lifespan,
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="Railway ticket issuance, verification and administration API",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(
    auth_router.router,
    prefix=f"{settings.API_V1_STR}/auth",
    tags=["Authentication"]
)

app.include_router(
    stations_router.router,
    prefix=f"{settings.API_V1_STR}/stations",
    tags=["Stations"]
)

app.include_router(
    staff_router.router,
    prefix=f"{settings.API_V1_STR}/staff",
    tags=["Staff"]
)

app.include_router(
    trains_router.router,
    prefix=f"{settings.API_V1_STR}/trains",
    tags=["Trains & Fares"]
)

app.include_router(
    tickets_router.router,
    prefix=f"{settings.API_V1_STR}/tickets",
    tags=["Ticket Issuance & Verification"]
)

app.include_router(
    reports_router,
    prefix=f"{settings.API_V1_STR}/reports",
    tags=["Reports & Data Management"]
)

@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": settings.PROJECT_NAME,
        "version": "1.0.0",
        "docs": "/docs"
    }

@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
