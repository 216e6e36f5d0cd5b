"""Main FastAPI application"""
from fastapi import FastAPI
from klaviyo_admin.middleware.cors import setup_cors
from klaviyo_admin.middleware.error_handler import ErrorHandlerMiddleware, setup_exception_handlers
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


app = FastAPI(
    title="Klaviyo Admin",
    description="Klaviyo profile and list console",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Setup CORS
setup_cors(app)

# Add error handling middleware
app.add_middleware(ErrorHandlerMiddleware)
setup_exception_handlers(app)

# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "klaviyo-admin"}

# Import and include routers
from klaviyo_admin.routers import forms, lists, pages, profiles

app.include_router(lists.router, prefix="/api/lists", tags=["Lists"])
app.include_router(profiles.router, prefix="/api/profiles", tags=["Profiles"])
app.include_router(forms.router, prefix="/api/form", tags=["Forms"])
app.include_router(pages.router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
