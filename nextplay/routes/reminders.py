# nextplay/routes/reminders.py
from fastapi import APIRouter, Depends

from nextplay.authz import require_admin
from nextplay.security.policy import Principal
from nextplay.services.reminders import send_due_reminders
from nextplay.utils.logger import log_activity

router = APIRouter(prefix="/api/reminders", tags=["reminders"])


@router.post("/send")
def send_reminders(principal: Principal = Depends(require_admin)):
    sent = send_due_reminders()
    log_activity(user_id=principal.identity_id, action="send_reminders", metadata={"sent": sent})
    return {"message": f"Sent {sent} reminder emails", "sentReminders": sent}
