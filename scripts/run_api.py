"""
Run the FastAPI backend server.
"""

import uvicorn
import os
import sys

# Add backend directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


if __name__ == "__main__":
    port = int(os.getenv("API_PORT", "8000"))

    print("=" * 60)
    print("Schedule Optimizer Bridge API Server")
    print("=" * 60)
    print(f"Starting server on http://localhost:{port}")
    print(f"API Documentation: http://localhost:{port}/docs")
    print("=" * 60)

    # No reload: the reloader would orphan an optimizer process started by the supervisor
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=port,
        reload=False,
        log_level="info"
    )
