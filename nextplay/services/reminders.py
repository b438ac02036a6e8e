# nextplay/services/reminders.py
"""
Recovery check-in reminders.

An injury is due when it is not yet back to Full Play, has not been
updated for REMINDER_AFTER_DAYS, and no reminder went out in that window.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from nextplay import db, settings
from nextplay.services.mailer import EmailDeliveryError, send_injury_reminder_email
from nextplay.timelines import FULL_PLAY

logger = logging.getLogger(__name__)


def due_injuries(now: Optional[datetime] = None) -> List[dict]:
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=settings.REMINDER_AFTER_DAYS)
    query = {
        "recoveryStatus": {"$ne": FULL_PLAY},
        "updatedAt": {"$lte": cutoff},
        "$or": [
            {"lastReminderSent": {"$exists": False}},
            {"lastReminderSent": None},
            {"lastReminderSent": {"$lte": cutoff}},
        ],
    }
    return list(db.injuries().find(query))


def send_due_reminders(now: Optional[datetime] = None) -> int:
    """Email the owning parent of every due injury; returns how many went out."""
    now = now or datetime.now(timezone.utc)
    sent = 0
    for injury in due_injuries(now):
        child = db.children().find_one({"_id": injury.get("child")})
        parent = db.users().find_one({"_id": child.get("parent")}) if child else None
        if not parent or not parent.get("email"):
            logger.warning("reminder skipped for injury %s: owner not found", injury["_id"])
            continue

        try:
            send_injury_reminder_email(
                parent["email"],
                parent.get("name", ""),
                child.get("name", ""),
                injury.get("type", ""),
                str(injury["_id"]),
            )
        except EmailDeliveryError:
            logger.warning("reminder email failed for injury %s", injury["_id"])
            continue

        db.injuries().update_one({"_id": injury["_id"]}, {"$set": {"lastReminderSent": now}})
        sent += 1

    logger.info("sent %d injury reminders", sent)
    return sent
