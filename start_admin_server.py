#!/usr/bin/env python3
"""
Start the Workflow Server admin API
Internal endpoints backed by the service-role client
"""

import sys
import uvicorn
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from workflow_server.core.config import load_settings

if __name__ == "__main__":
    settings = load_settings()
    print("🚀 Starting Workflow Server admin API...")
    print(f"📋 Admin endpoints: http://localhost:{settings.server.admin_port}/admin/docs")
    print("🔐 Requires SUPABASE_SERVICE_ROLE_KEY and WORKFLOW_INTERNAL_API_KEY")

    uvicorn.run(
        "workflow_server.app_admin:app",
        host=settings.server.bind,
        port=settings.server.admin_port,
        log_level="info",
        reload=True,
        reload_dirs=["workflow_server"]
    )
