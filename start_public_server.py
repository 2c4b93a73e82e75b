#!/usr/bin/env python3
"""
Start the Workflow Server public API
User-facing endpoints (auth, diagnostics)
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
    print("🚀 Starting Workflow Server public API...")
    print(f"📋 Public endpoints: http://localhost:{settings.server.public_port}/docs")
    print("🔑 Requires NEXT_PUBLIC_SUPABASE_URL and NEXT_PUBLIC_SUPABASE_ANON_KEY")

    uvicorn.run(
        "workflow_server.app_public:app",
        host=settings.server.bind,
        port=settings.server.public_port,
        log_level="info",
        reload=True,
        reload_dirs=["workflow_server"]
    )
