"""
Workflow Server Admin Application
Internal endpoints that need the service-role Supabase client
"""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.logging import setup_logging
from .core.config import load_settings
from .api import catalog as catalog_api

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

# Fails at import when the service credentials are missing
from .database.admin_client import supabase_admin  # noqa: E402

# Create FastAPI app for admin
app = FastAPI(
    title="Workflow Server Admin API",
    description="Internal admin endpoints",
    version="1.0.0",
    docs_url="/admin/docs",
    redoc_url="/admin/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.server.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.supabase_admin = supabase_admin

app.include_router(catalog_api.router, prefix="/admin")
logger.info("✅ Admin server Supabase client ready")

@app.get("/admin/health")
async def health_check():
    """Health check endpoint for admin server"""
    return {"status": "healthy", "server": "admin", "version": "1.0.0"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "workflow_server.app_admin:app",
        host=settings.server.bind,
        port=settings.server.admin_port,
        log_level="info",
        reload=True
    )
