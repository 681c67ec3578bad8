"""
Entry point for the Meet Recorder API.
Starts the FastAPI application under uvicorn.
"""

import sys
import uvicorn

from meet_recorder.config import settings


def run():
    """Run the Meet Recorder API server."""
    print("\n" + "=" * 60)
    print("MEET RECORDER API")
    print("=" * 60)
    print(f"🚀 Starting FastAPI application...")
    print(f"📍 Host: {settings.server.host}:{settings.server.port}")
    print(f"❤️  Health check: http://localhost:{settings.server.port}/health")
    print(f"🌐 Environment: {settings.environment} (headless={settings.headless})")
    print(f"📡 API base URL: {settings.api.base_url}")
    print("=" * 60 + "\n")

    uvicorn.run(
        "meet_recorder.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    try:
        run()
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"\n❌ Fatal error: {e}")
        sys.exit(1)
