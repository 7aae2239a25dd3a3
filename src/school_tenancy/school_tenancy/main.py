from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from config import get_settings_module

from .container import Container, build_container

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def bootstrap() -> Container:
    """Load settings, build the container and check database connectivity."""
    load_dotenv(override=False)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    logger.info("[school-tenancy] settings=%s", settings_module)

    container = build_container(settings=settings)

    if bool(getattr(settings, "AUTO_INIT_DB", False)) and container.lifecycle is not None:
        result = container.lifecycle.init_public()
        if not result.success:
            raise RuntimeError(f"Public schema initialization failed: {result.error}")

    container.backend.init()
    return container
