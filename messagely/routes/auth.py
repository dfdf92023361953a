import logging

from fastapi import APIRouter, Depends

from ..schemas.users import RegisterIn, LoginIn, TokenOut
from ..auth import CredentialService, get_credentials
from ..crud import UserRepository
from ..errors import AuthenticationError, BadRequestError
from .deps import get_users

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post('/login', response_model=TokenOut)
async def login(
    payload: LoginIn,
    credentials: CredentialService = Depends(get_credentials),
    users: UserRepository = Depends(get_users),
):
    """{username, password} => {token}; bumps last_login_at on success."""
    if not await credentials.authenticate(payload.username, payload.password):
        logger.info({'msg': 'login_failed', 'username': payload.username})
        raise AuthenticationError('Password incorrect', status_code=400)

    await users.update_login_timestamp(payload.username)
    logger.info({'msg': 'login_ok', 'username': payload.username})
    return {'token': credentials.issue_token({'username': payload.username})}


@router.post('/register', response_model=TokenOut)
async def register(
    payload: RegisterIn,
    credentials: CredentialService = Depends(get_credentials),
):
    """{username, password, first_name, last_name, phone} => {token}"""
    if not payload.username or not payload.password:
        raise BadRequestError('Username and password required!')

    user = await credentials.register(payload)
    # only the username goes into the token, never the stored hash
    return {'token': credentials.issue_token({'username': user['username']})}
