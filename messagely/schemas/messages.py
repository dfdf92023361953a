from typing import Optional, List

from pydantic import BaseModel

from .users import UserBrief, UtcDatetime


class MessageIn(BaseModel):
    to_username: str
    body: str


class MessageCreated(BaseModel):
    id: int
    from_username: str
    to_username: str
    body: str
    sent_at: UtcDatetime


class MessageSent(BaseModel):
    id: int
    body: str
    sent_at: UtcDatetime
    read_at: Optional[UtcDatetime] = None
    to_user: UserBrief


class MessageReceived(BaseModel):
    id: int
    body: str
    sent_at: UtcDatetime
    read_at: Optional[UtcDatetime] = None
    from_user: UserBrief


class MessageDetail(BaseModel):
    id: int
    body: str
    sent_at: UtcDatetime
    read_at: Optional[UtcDatetime] = None
    from_user: UserBrief
    to_user: UserBrief


class MessageReadState(BaseModel):
    id: int
    read_at: UtcDatetime


class MessagesSentOut(BaseModel):
    messages: List[MessageSent]


class MessagesReceivedOut(BaseModel):
    messages: List[MessageReceived]


class MessageCreatedOut(BaseModel):
    message: MessageCreated


class MessageDetailOut(BaseModel):
    message: MessageDetail


class MessageReadOut(BaseModel):
    message: MessageReadState
