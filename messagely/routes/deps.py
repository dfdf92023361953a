from fastapi import Request

from ..crud import UserRepository, MessageRepository


def get_users(request: Request) -> UserRepository:
    return request.app.state.users


def get_messages(request: Request) -> MessageRepository:
    return request.app.state.messages
