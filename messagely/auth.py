import logging
from datetime import datetime, timedelta, timezone

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from .config import Settings
from .db import Database
from .errors import AuthenticationError, ForbiddenError, UserAlreadyExistsError
from .models.users import User
from .schemas.users import MAX_PASSWORD_LEN

logger = logging.getLogger(__name__)


class CredentialService:
    """Password hashing, registration/login checks and JWT issuing."""

    def __init__(self, database: Database, settings: Settings):
        self.database = database
        self.settings = settings
        self.pwd_ctx = CryptContext(
            schemes=['bcrypt'],
            deprecated='auto',
            bcrypt__rounds=settings.bcrypt_work_factor,
        )

    def hash_password(self, password: str) -> str:
        return self.pwd_ctx.hash(password)

    def verify_password(self, password: str, hashed: str) -> bool:
        return self.pwd_ctx.verify(password, hashed)

    async def register(self, payload) -> dict:
        """Insert a new user and return {username, password, first_name, last_name, phone}.

        ``password`` in the result is the bcrypt hash; callers must not hand it
        back to clients.
        """
        now = datetime.now(timezone.utc)
        user = User(
            username=payload.username,
            password=self.hash_password(payload.password),
            first_name=payload.first_name,
            last_name=payload.last_name,
            phone=payload.phone,
            join_at=now,
            last_login_at=now,
        )
        async with self.database.session() as session:
            session.add(user)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise UserAlreadyExistsError(f'Username already taken: {payload.username}')
        logger.info({'msg': 'user_registered', 'username': user.username})
        return {
            'username': user.username,
            'password': user.password,
            'first_name': user.first_name,
            'last_name': user.last_name,
            'phone': user.phone,
        }

    async def authenticate(self, username: str, password: str) -> bool:
        async with self.database.session() as session:
            q = await session.execute(select(User.password).where(User.username == username))
            hashed = q.scalars().first()
        if hashed is None:
            raise AuthenticationError('User does not exist', status_code=400)
        # bcrypt only sees the first 72 bytes; longer input can never be the stored password
        if len(password.encode('utf-8')) > MAX_PASSWORD_LEN:
            return False
        return self.verify_password(password, hashed)

    def issue_token(self, claims: dict) -> str:
        to_encode = dict(claims)
        if self.settings.access_token_expire_minutes:
            expire = datetime.now(timezone.utc) + timedelta(minutes=self.settings.access_token_expire_minutes)
            to_encode.update({'exp': expire})
        return jwt.encode(to_encode, self.settings.jwt_secret, algorithm=self.settings.jwt_algorithm)

    def decode_token(self, token: str):
        try:
            return jwt.decode(token, self.settings.jwt_secret, algorithms=[self.settings.jwt_algorithm])
        except JWTError:
            return None


bearer = HTTPBearer(auto_error=False)


def get_credentials(request: Request) -> CredentialService:
    return request.app.state.credentials


async def get_current_user(
    auth: HTTPAuthorizationCredentials = Depends(bearer),
    credentials: CredentialService = Depends(get_credentials),
) -> dict:
    """Claims of the caller's token; 401 when the token is missing or bad."""
    if auth is None:
        raise AuthenticationError('Unauthorized')
    payload = credentials.decode_token(auth.credentials)
    if not payload or not payload.get('username'):
        raise AuthenticationError('Unauthorized')
    return payload


async def ensure_correct_user(username: str, current_user: dict = Depends(get_current_user)) -> dict:
    if current_user['username'] != username:
        raise ForbiddenError('Forbidden')
    return current_user
