import logging
from datetime import datetime, timezone

from nextplay import db, settings


def configure_logging(level: str = None) -> None:
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def log_activity(user_id: str, action: str, metadata: dict | None = None):
    db.activity_logs().insert_one({
        "user_id": user_id,
        "action": action,
        "timestamp": datetime.now(timezone.utc),
        "metadata": metadata or {},
    })
