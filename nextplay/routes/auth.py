# nextplay/routes/auth.py
import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError

from nextplay import db, settings
from nextplay.auth import create_access_token, get_password_hash, new_one_time_token, verify_password
from nextplay.authz import get_principal
from nextplay.db.identities import find_identity_by_email, public_user
from nextplay.errors import BadRequest, Conflict, Unauthenticated
from nextplay.schemas.accounts import EmailIn, LoginIn, RegisterIn, ResetPasswordIn, TokenIn
from nextplay.schemas.records import load_payload
from nextplay.security.policy import PARENT, Principal
from nextplay.services.mailer import (
    EmailDeliveryError,
    send_password_reset_email,
    send_verification_email,
    send_welcome_email,
)
from nextplay.utils.logger import log_activity
from nextplay.utils.serialize import to_jsonable

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

RESET_REQUESTED = "If an account with that email exists, a password reset link has been sent."


def _utcnow():
    return datetime.now(timezone.utc)


def _verification_fields() -> dict:
    return {
        "emailVerificationToken": new_one_time_token(),
        "emailVerificationExpires": _utcnow() + timedelta(hours=settings.VERIFY_TOKEN_HOURS),
    }


def _send_quietly(send, *args) -> None:
    """Account flows carry on when the mail provider is down."""
    try:
        send(*args)
    except EmailDeliveryError:
        logger.warning("%s failed for %s", send.__name__, args[0])


# ---------- Register ----------
@router.post("/register", status_code=201)
async def register(request: Request):
    body = await load_payload(request, RegisterIn)
    email = body.email.strip().lower()
    if find_identity_by_email(email):
        raise Conflict("User already exists with this email")

    now = _utcnow()
    verification = _verification_fields()
    doc = {
        "name": body.name.strip(),
        "email": email,
        "password": get_password_hash(body.password),
        "role": PARENT,
        "children": [],
        "isEmailVerified": False,
        "consent_accepted": body.consent_accepted,
        "isThirteenOrOlder": body.isThirteenOrOlder,
        "createdAt": now,
        "updatedAt": now,
        **verification,
    }
    try:
        doc["_id"] = db.users().insert_one(doc).inserted_id
    except DuplicateKeyError:
        # lost a race with a concurrent registration; the unique index decides
        raise Conflict("User already exists with this email")

    _send_quietly(send_verification_email, email, verification["emailVerificationToken"])
    log_activity(user_id=str(doc["_id"]), action="register", metadata={"email": email})

    return {
        "message": "User created successfully. Please check your email to verify your account.",
        "user": to_jsonable(public_user(doc)),
    }


# ---------- Login ----------
@router.post("/login")
async def login(request: Request):
    body = await load_payload(request, LoginIn)
    user = find_identity_by_email(body.email)
    if not user or not verify_password(body.password, user.get("password")):
        raise Unauthenticated("Invalid credentials")

    if not user.get("isEmailVerified"):
        verification = _verification_fields()
        db.users().update_one({"_id": user["_id"]}, {"$set": verification})
        _send_quietly(send_verification_email, user["email"], verification["emailVerificationToken"])
        return JSONResponse(
            {"error": "Unverified, check your email for verification.", "requiresVerification": True},
            status_code=403,
        )

    token = create_access_token(user)
    log_activity(user_id=str(user["_id"]), action="login_password", metadata={})

    resp = JSONResponse({"message": "Login successful", "user": to_jsonable(public_user(user))})
    resp.set_cookie(
        key=settings.TOKEN_COOKIE,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="strict",
        max_age=settings.TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
    )
    return resp


# ---------- Logout ----------
@router.post("/logout")
def logout():
    response = JSONResponse({"message": "Logged Out"})
    response.delete_cookie(settings.TOKEN_COOKIE)
    return response


# ---------- Current user ----------
@router.get("/me")
def me(principal: Principal = Depends(get_principal)):
    return {"user": to_jsonable(public_user(principal.identity))}


# ---------- Email verification ----------
@router.post("/verify-email")
async def verify_email(request: Request):
    body = await load_payload(request, TokenIn)
    user = db.users().find_one({
        "emailVerificationToken": body.token,
        "emailVerificationExpires": {"$gt": _utcnow()},
    })
    if not user:
        raise BadRequest("Invalid or expired verification token")

    db.users().update_one(
        {"_id": user["_id"]},
        {
            "$set": {"isEmailVerified": True, "updatedAt": _utcnow()},
            "$unset": {"emailVerificationToken": "", "emailVerificationExpires": ""},
        },
    )
    _send_quietly(send_welcome_email, user["email"], user.get("name", ""))
    log_activity(user_id=str(user["_id"]), action="verify_email", metadata={})
    return {"message": "Email verified successfully"}


# ---------- Forgot Password ----------
@router.post("/forgot-password")
async def forgot_password(request: Request):
    body = await load_payload(request, EmailIn)
    user = find_identity_by_email(body.email)
    if user:
        token = new_one_time_token()
        db.users().update_one(
            {"_id": user["_id"]},
            {"$set": {
                "passwordResetToken": token,
                "passwordResetExpires": _utcnow() + timedelta(minutes=settings.RESET_TOKEN_MINUTES),
            }},
        )
        _send_quietly(send_password_reset_email, user["email"], token)
    # same answer either way so the endpoint can't be used to probe for accounts
    return {"message": RESET_REQUESTED}


# ---------- Reset Password ----------
@router.post("/reset-password")
async def reset_password(request: Request):
    body = await load_payload(request, ResetPasswordIn)
    user = db.users().find_one({
        "passwordResetToken": body.token,
        "passwordResetExpires": {"$gt": _utcnow()},
    })
    if not user:
        raise BadRequest("Invalid or expired reset token")

    db.users().update_one(
        {"_id": user["_id"]},
        {
            "$set": {"password": get_password_hash(body.password), "updatedAt": _utcnow()},
            "$unset": {"passwordResetToken": "", "passwordResetExpires": ""},
        },
    )
    log_activity(user_id=str(user["_id"]), action="reset_password", metadata={})
    return {"message": "Password updated successfully"}
