"""Application entry point.

Runs the NiceGUI chat interface. Environment variables are loaded from .env file.
"""

import logging
import os
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Start the chat UI.

    HOST and PORT select where the UI is served (default 0.0.0.0:8080).
    """
    from nicegui import ui

    from docchat.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8080"))
    logger.info(f"Chat UI available at http://localhost:{port}/")

    ui.run(
        title="DocDocGo",
        host=host,
        port=port,
        reload=False,
    )


if __name__ in {"__main__", "__mp_main__"}:
    main()
