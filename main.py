"""Run the products API with uvicorn using the loaded configuration."""

import logging

import uvicorn

from src.config import get_config, get_environment


def main() -> None:
    config = get_config()

    logging.basicConfig(
        level=config.logging.level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger = logging.getLogger(__name__)
    logger.info(
        f"Starting products API ({get_environment()} environment, "
        f"{config.storage.backend} backend) on {config.server.host}:{config.server.port}"
    )

    uvicorn.run(
        "src.api:app",
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
