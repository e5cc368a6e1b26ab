"""Run the Stockboard API under uvicorn with settings from the environment."""
import logging

import uvicorn

from stockboard.api.app import create_app
from stockboard.config import load_config

app = create_app(use_lifespan=True)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )
    config = load_config()
    uvicorn.run(app, host=config.host, port=config.port)
