import os
import logging
import uvicorn

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

if os.environ.get("DEBUG", "0") == "1":
    logging.getLogger().setLevel(logging.DEBUG)

from api import create_app
from config import get_config

config = get_config()
app = create_app()

if __name__ == "__main__":
    logger.info(f"Starting French Buddy chat server on {config.host}:{config.port}")
    if config.openai_api_key:
        logger.info(f"Upstream model: {config.openai_model}")
    else:
        logger.warning("OPENAI_API_KEY not set, replies will fall back")

    uvicorn.run(app, host=config.host, port=config.port)
