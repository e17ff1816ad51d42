from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables, seed_default_settings

logger = logging.getLogger(__name__)


def create_container() -> Container:
    """Composition root for the HTTP (or any other) layer embedding the engine."""
    load_dotenv(override=False)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db_config = getattr(settings, "DB_CONFIG")
    logger.debug(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    container = build_container(
        db_config=db_config,
        default_timezone=getattr(settings, "DEFAULT_TIMEZONE", None),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(container.conn)
        logger.info("Schema ready (tables=%d)", len(list_tables(container.conn)))
        added = seed_default_settings(container.settings_repo)
        if added:
            logger.info("Seeded default settings: %s", ", ".join(added))

    return container
