"""Application entry point for the Chat Actions API server."""

import uvicorn

from chat_actions.api.app import app
from chat_actions.db.session import get_engine, init_db
from chat_actions.utils.config import load_config
from chat_actions.utils.logger import setup_logging


def main() -> None:
    """Create the schema if needed and start the FastAPI server."""
    config = load_config()
    setup_logging(config.log_level)
    init_db(get_engine(config.database))
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
