from nextplay import db
from nextplay.utils.audit import ensure_audit_indexes


def ensure_indexes():
    # accounts
    db.users().create_index("email", unique=True)
    db.users().create_index("emailVerificationToken", sparse=True)
    db.users().create_index("passwordResetToken", sparse=True)

    # records
    db.children().create_index([("parent", 1), ("createdAt", -1)])
    db.injuries().create_index([("child", 1), ("date", -1)])
    db.injuries().create_index([("recoveryStatus", 1), ("updatedAt", 1)])

    # activity / audit
    db.activity_logs().create_index([("user_id", 1), ("timestamp", -1)])
    ensure_audit_indexes()
