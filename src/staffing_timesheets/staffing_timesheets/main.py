from __future__ import annotations

import importlib
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.logging_config import configure_logging, get_logger
from .container import Container, build_container
from .core.constants import DEFAULT_NOTIFICATION_TTL_SECONDS, DEFAULT_WEEK_WINDOW
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig
from .timesheets.controller import register as register_timesheets

logger = get_logger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        json_output=bool(getattr(settings, "LOG_JSON", False)),
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info("settings=%s db=%s", settings_module, DBConfig.from_mapping(db_config).describe())

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            week_window=int(getattr(settings, "WEEK_WINDOW", DEFAULT_WEEK_WINDOW)),
            notification_ttl_seconds=float(getattr(settings, "NOTIFICATION_TTL_SECONDS", DEFAULT_NOTIFICATION_TTL_SECONDS)),
        )

    register_timesheets(app, container)

    return app
