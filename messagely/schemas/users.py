from datetime import datetime, timezone
from typing import Annotated, Optional, List

from pydantic import AfterValidator, BaseModel, field_validator

MAX_PASSWORD_LEN = 72  # bcrypt limit


def as_utc(v: datetime) -> datetime:
    # stored values are written in UTC; some backends (sqlite) hand them back naive
    return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class RegisterIn(BaseModel):
    # presence of username/password is checked by the route so it can answer
    # with its own message
    username: Optional[str] = None
    password: Optional[str] = None
    first_name: str
    last_name: str
    phone: str

    @field_validator('password')
    @classmethod
    def password_length_guard(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v.encode('utf-8')) > MAX_PASSWORD_LEN:
            raise ValueError(f'password must be <= {MAX_PASSWORD_LEN} bytes')
        return v


class LoginIn(BaseModel):
    username: str
    password: str


class TokenOut(BaseModel):
    token: str


class UserBrief(BaseModel):
    username: str
    first_name: str
    last_name: str
    phone: str


class UserDetail(UserBrief):
    join_at: UtcDatetime
    last_login_at: Optional[UtcDatetime] = None


class UsersOut(BaseModel):
    users: List[UserBrief]


class UserOut(BaseModel):
    user: UserDetail
