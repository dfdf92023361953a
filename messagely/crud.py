import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update

from .db import Database
from .errors import ForbiddenError, NotFoundError
from .models.users import User
from .models.messages import Message

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = (User.username, User.first_name, User.last_name, User.phone)


class UserRepository:
    def __init__(self, database: Database):
        self.database = database

    async def update_login_timestamp(self, username: str):
        async with self.database.session() as session:
            await session.execute(
                update(User).where(User.username == username).values(last_login_at=datetime.now(timezone.utc))
            )
            await session.commit()

    async def all(self):
        """Basic info on all users: [{username, first_name, last_name, phone}, ...]"""
        async with self.database.session() as session:
            res = await session.execute(select(*PROFILE_COLUMNS))
            rows = res.mappings().all()
        if not rows:
            raise NotFoundError('No users selected')
        return [dict(r) for r in rows]

    async def get(self, username: str):
        async with self.database.session() as session:
            res = await session.execute(
                select(*PROFILE_COLUMNS, User.join_at, User.last_login_at).where(User.username == username)
            )
            row = res.mappings().first()
        if not row:
            raise NotFoundError('No users selected')
        return dict(row)


class MessageRepository:
    def __init__(self, database: Database):
        self.database = database

    async def _profile(self, idx: int, username: str):
        # own session per lookup; one AsyncSession must not be shared across tasks
        async with self.database.session() as session:
            res = await session.execute(select(*PROFILE_COLUMNS).where(User.username == username))
            row = res.mappings().first()
        if not row:
            raise NotFoundError(f'No users selected: {username}')
        return idx, dict(row)

    async def _expand(self, usernames):
        """Resolve each username concurrently; result keyed by request index."""
        results = await asyncio.gather(
            *(self._profile(idx, name) for idx, name in enumerate(usernames)),
            return_exceptions=True,
        )
        errors = [r for r in results if isinstance(r, BaseException)]
        if errors:
            for err in errors[1:]:
                logger.warning({'msg': 'expansion_lookup_failed', 'error': repr(err)})
            raise errors[0]
        return dict(results)

    async def _thread(self, own_column, other_column, username: str, key: str):
        async with self.database.session() as session:
            res = await session.execute(
                select(Message.id, Message.body, Message.sent_at, Message.read_at, other_column.label(key))
                .where(own_column == username)
                .order_by(Message.id)
            )
            messages = [dict(r) for r in res.mappings().all()]
        if not messages:
            raise NotFoundError('No messages available/selected')
        profiles = await self._expand([m[key] for m in messages])
        for idx, message in enumerate(messages):
            message[key] = profiles[idx]
        return messages

    async def messages_from(self, username: str):
        """[{id, body, sent_at, read_at, to_user: {username, first_name, last_name, phone}}]"""
        return await self._thread(Message.from_username, Message.to_username, username, 'to_user')

    async def messages_to(self, username: str):
        """[{id, body, sent_at, read_at, from_user: {username, first_name, last_name, phone}}]"""
        return await self._thread(Message.to_username, Message.from_username, username, 'from_user')

    async def create(self, from_username: str, to_username: str, body: str):
        async with self.database.session() as session:
            res = await session.execute(
                select(User.username).where(User.username.in_([from_username, to_username]))
            )
            found = set(res.scalars().all())
            for name in (from_username, to_username):
                if name not in found:
                    raise NotFoundError(f'No users selected: {name}')
            m = Message(from_username=from_username, to_username=to_username, body=body,
                        sent_at=datetime.now(timezone.utc))
            session.add(m)
            await session.commit()
            await session.refresh(m)
        logger.info({'msg': 'message_sent', 'message_id': m.id, 'from': from_username, 'to': to_username})
        return {
            'id': m.id,
            'from_username': m.from_username,
            'to_username': m.to_username,
            'body': m.body,
            'sent_at': m.sent_at,
        }

    async def get(self, message_id: int):
        """{id, body, sent_at, read_at, from_user: {...}, to_user: {...}}"""
        async with self.database.session() as session:
            res = await session.execute(select(Message).where(Message.id == message_id))
            m = res.scalars().first()
        if not m:
            raise NotFoundError(f'No such message: {message_id}')
        profiles = await self._expand([m.from_username, m.to_username])
        return {
            'id': m.id,
            'body': m.body,
            'sent_at': m.sent_at,
            'read_at': m.read_at,
            'from_user': profiles[0],
            'to_user': profiles[1],
        }

    async def mark_read(self, message_id: int, reader: Optional[str] = None):
        """Set read_at; when ``reader`` is given it must be the recipient."""
        async with self.database.session() as session:
            res = await session.execute(select(Message).where(Message.id == message_id))
            m = res.scalars().first()
            if not m:
                raise NotFoundError(f'No such message: {message_id}')
            if reader is not None and m.to_username != reader:
                raise ForbiddenError('Forbidden')
            m.read_at = datetime.now(timezone.utc)
            await session.commit()
        return {'id': m.id, 'read_at': m.read_at}
