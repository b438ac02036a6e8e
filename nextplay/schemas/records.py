from datetime import datetime
from typing import List, Literal, Optional, Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, Field, ValidationError

from nextplay.errors import BadRequest

Gender = Literal["male", "female", "other"]
Severity = Literal["mild", "moderate", "severe"]
RecoveryStatus = Literal["Resting", "Light Activity", "Full Play"]

M = TypeVar("M", bound=BaseModel)


class ChildIn(BaseModel):
    name: str = Field(min_length=1)
    age: int = Field(ge=0, le=18)
    gender: Gender = "male"
    sport: str = ""
    notes: str = ""


class ChildUpdate(BaseModel):
    # omitted optional fields keep their stored value
    name: str = Field(min_length=1)
    age: int = Field(ge=0, le=18)
    gender: Optional[Gender] = None
    sport: Optional[str] = None
    notes: Optional[str] = None


class InjuryIn(BaseModel):
    childId: str = Field(min_length=1)
    type: str = Field(min_length=1)
    description: str = Field(min_length=1)
    location: str = Field(min_length=1)
    severity: Severity
    date: Optional[datetime] = None
    photos: List[str] = []
    notes: str = ""
    suggestedTimeline: Optional[int] = Field(default=None, ge=1)


class InjuryUpdate(BaseModel):
    type: str = Field(min_length=1)
    description: str = Field(min_length=1)
    location: str = Field(min_length=1)
    severity: Severity
    # any status may replace any other; no forward-only rule
    recoveryStatus: RecoveryStatus
    date: Optional[datetime] = None
    notes: Optional[str] = None
    photos: Optional[List[str]] = None


def parse_payload(model: Type[M], data) -> M:
    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object")
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        err = exc.errors()[0]
        field = ".".join(str(p) for p in err.get("loc", ())) or "body"
        raise BadRequest(f"{field}: {err.get('msg', 'invalid value')}")


async def load_payload(request: Request, model: Type[M]) -> M:
    """
    Bodies are read inside the handler, after authorization, so a refused
    caller gets 401/403/404 whatever they sent.
    """
    try:
        data = await request.json()
    except ValueError:
        raise BadRequest("Invalid JSON body")
    return parse_payload(model, data)
