"""
Entry point for the user portal.
Starts the web server on a single worker.
"""

import sys
import traceback
from pathlib import Path

import uvicorn

# Load .env before reading settings
from dotenv import load_dotenv

env_path = Path(__file__).resolve().parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

from portal.utils.config import load_settings  # noqa: E402


def main() -> None:
    settings = load_settings()
    print(f"Starting {settings.app.name} ({settings.app.environment})")
    print(f"Server is running at http://{settings.server.host}:{settings.server.port}")

    try:
        # sessions are held in process memory: never run more than one worker
        uvicorn.run(
            "portal_web.main:create_app",
            factory=True,
            host=settings.server.host,
            port=settings.server.port,
            workers=1,
            log_level=settings.logging.level.lower(),
        )
    except KeyboardInterrupt:
        print("\n\nShutdown complete.")
    except Exception as e:
        print(f"\nFatal error: {e}", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
