"""
Workflow Server Public Application
User-facing endpoints; uses only the anonymous-key Supabase client
"""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.logging import setup_logging
from .core.config import load_settings
from .api import auth as auth_api
from .api import debug as debug_api
from .database.public_client import get_public_client, close_public_client

# Load settings
settings = load_settings()

# Setup logging
setup_logging(
    log_level=settings.logging.level,
    log_dir=settings.logging.log_dir,
    enable_file_logging=settings.logging.enable_file_logging,
    enable_console_logging=settings.logging.enable_console_logging,
    structured=settings.logging.structured,
)
logger = logging.getLogger(__name__)

# Create FastAPI app for user-facing traffic
app = FastAPI(
    title="Workflow Server Public API",
    description="User-facing endpoints backed by the public Supabase client",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.server.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_api.router)
if settings.server.debug_routes:
    app.include_router(debug_api.router)

@app.on_event("startup")
async def startup_event():
    """Build the public client before the first request arrives"""
    try:
        get_public_client()
        logger.info("✅ Public server Supabase client ready")
    except Exception as e:
        logger.error(f"❌ Public server Supabase client failed: {e}")
        raise

@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    close_public_client()
    logger.info("✅ Public server stopped")

@app.get("/health")
async def health_check():
    """Health check endpoint for public server"""
    return {"status": "healthy", "server": "public", "version": "1.0.0"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "workflow_server.app_public:app",
        host=settings.server.bind,
        port=settings.server.public_port,
        log_level="info",
        reload=True
    )
