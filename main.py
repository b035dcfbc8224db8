"""
main.py
========
Central entry point for the SignRelay application.

Run with:
    uvicorn main:app --port 3000
or:
    python main.py          (binds HOST:PORT, default 0.0.0.0:3000)
"""

import logging

from dotenv import load_dotenv

load_dotenv()  # Load .env before any module reads env vars

from src import config  # noqa: E402

# Configure logging for the entire application
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# Keep transport chatter out of the relay logs.
for _transport_logger_name in (
    "gradio_client",
    "httpx",
    "httpcore",
    "httpcore.http11",
    "httpcore.connection",
):
    logging.getLogger(_transport_logger_name).setLevel(logging.WARNING)

from src.api.app import app  # noqa: F401, E402

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=config.HOST, port=config.PORT)
