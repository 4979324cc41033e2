"""Main FastAPI application."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from storefront.config import settings
from storefront.database.connection import init_db
from storefront.routes.admin import router as admin_router
from storefront.routes.user import router as user_router

# Create database tables
init_db()

# Initialize FastAPI app
app = FastAPI(
    title=settings.project_name,
    version=settings.api_version,
    description="Storefront API - catalog, cart, wishlist and checkout"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(admin_router)
app.include_router(user_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Storefront API",
        "version": settings.api_version,
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
