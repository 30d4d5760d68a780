"""Run the budget service with uvicorn"""
import sys
from pathlib import Path

# Make `budget_app` importable when run from a source checkout
BACKEND_DIR = Path(__file__).resolve().parent
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))


def main():
    import uvicorn

    from budget_app.core.config import get_settings
    from budget_app.main import app

    settings = get_settings()

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # keep the handlers installed by LoggingConfig
    )


if __name__ == "__main__":
    main()
