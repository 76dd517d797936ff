from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from src.config import settings
from src.exception_handlers import register_exception_handlers
from src.logger_config import logger
from src.auth import router as auth_router
from src.buses import router as buses_router
from src.bookings import router as bookings_router, status_router as booking_status_router
from src.payments import router as payments_router
from src.admin import router as admin_router

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="College Bus Pass Booking API",
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

register_exception_handlers(app)

# Include routers
app.include_router(
    bookings_router,
    prefix=f"{settings.API_PREFIX}/bookings",
    tags=["Bookings & Tickets"]
)

app.include_router(
    booking_status_router,
    prefix=settings.API_PREFIX,
    tags=["Bookings & Tickets"]
)

app.include_router(
    buses_router,
    prefix=f"{settings.API_PREFIX}/buses",
    tags=["Buses & Availability"]
)

app.include_router(
    payments_router,
    prefix=f"{settings.API_PREFIX}/payment",
    tags=["Payments"]
)

app.include_router(
    auth_router,
    prefix=f"{settings.API_PREFIX}/admin",
    tags=["Admin Authentication"]
)

app.include_router(
    admin_router.router,
    prefix=f"{settings.API_PREFIX}/admin",
    tags=["Admin System"]
)

logger.info(f"{settings.PROJECT_NAME} API ready ({settings.ENVIRONMENT})")

@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "College Bus Pass Booking API",
        "version": "1.0.0",
        "docs": "/docs"
    }

@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("src.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
