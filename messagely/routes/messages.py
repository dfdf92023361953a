from fastapi import APIRouter, Depends

from ..schemas.messages import MessageIn, MessageCreatedOut, MessageDetailOut, MessageReadOut
from ..auth import get_current_user
from ..crud import MessageRepository
from ..errors import ForbiddenError
from .deps import get_messages

router = APIRouter()


@router.post('', response_model=MessageCreatedOut)
async def send(
    payload: MessageIn,
    current_user: dict = Depends(get_current_user),
    messages: MessageRepository = Depends(get_messages),
):
    m = await messages.create(current_user['username'], payload.to_username, payload.body)
    return {'message': m}


@router.get('/{message_id}', response_model=MessageDetailOut)
async def detail(
    message_id: int,
    current_user: dict = Depends(get_current_user),
    messages: MessageRepository = Depends(get_messages),
):
    """Only the sender or the recipient may read a message."""
    m = await messages.get(message_id)
    if current_user['username'] not in (m['from_user']['username'], m['to_user']['username']):
        raise ForbiddenError('Forbidden')
    return {'message': m}


@router.post('/{message_id}/read', response_model=MessageReadOut)
async def mark_read(
    message_id: int,
    current_user: dict = Depends(get_current_user),
    messages: MessageRepository = Depends(get_messages),
):
    return {'message': await messages.mark_read(message_id, reader=current_user['username'])}
