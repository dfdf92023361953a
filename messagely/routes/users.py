from fastapi import APIRouter, Depends

from ..schemas.users import UsersOut, UserOut
from ..schemas.messages import MessagesSentOut, MessagesReceivedOut
from ..auth import get_current_user, ensure_correct_user
from ..crud import UserRepository, MessageRepository
from .deps import get_users, get_messages

router = APIRouter()


@router.get('', response_model=UsersOut)
async def list_users(
    current_user: dict = Depends(get_current_user),
    users: UserRepository = Depends(get_users),
):
    return {'users': await users.all()}


@router.get('/{username}', response_model=UserOut)
async def get_user(
    username: str,
    current_user: dict = Depends(get_current_user),
    users: UserRepository = Depends(get_users),
):
    return {'user': await users.get(username)}


@router.get('/{username}/to', response_model=MessagesReceivedOut)
async def messages_to(
    username: str,
    current_user: dict = Depends(ensure_correct_user),
    messages: MessageRepository = Depends(get_messages),
):
    return {'messages': await messages.messages_to(username)}


@router.get('/{username}/from', response_model=MessagesSentOut)
async def messages_from(
    username: str,
    current_user: dict = Depends(get_current_user),
    messages: MessageRepository = Depends(get_messages),
):
    return {'messages': await messages.messages_from(username)}
