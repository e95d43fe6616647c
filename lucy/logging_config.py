from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configura el logger raíz una sola vez (uvicorn --reload importa dos veces)."""
    root = logging.getLogger()
    root.setLevel(level.upper())
    if root.handlers:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # SQLAlchemy es muy ruidoso en INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
