from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Iterable, NamedTuple

from sqlalchemy import and_, func, select
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from ..errors import QueryTimeoutError, RepositoryUnavailableError, SchemaIncompatibleError
from ..models import Actor, Image, Page, Revision, User, UserGroup
from ..scoring.records import RevisionEvent

logger = logging.getLogger(__name__)

# Columns missing from older wiki schemas; queries fall back to a compatible
# shape when a probe finds them absent.
OPTIONAL_COLUMNS = {
    "page_content_model": Page.page_content_model,
    "img_actor": Image.img_actor,
}


class RankedRow(NamedTuple):
    user_id: int
    user_name: str
    value: int


def _describe(exc: SQLAlchemyError) -> str:
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)


class ActivityRepository:
    """Read-only queries against the wiki's user, revision, page and image tables."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        bot_group: str = "bot",
        revision_cap: int = 10_000,
        query_timeout: float = 10.0,
    ) -> None:
        self.session = session
        self.bot_group = bot_group
        self.revision_cap = revision_cap
        self.query_timeout = query_timeout
        self._columns: dict[str, bool] = {}

    async def _execute(self, statement: Select, *, operation: str):
        try:
            return await asyncio.wait_for(self.session.execute(statement), timeout=self.query_timeout)
        except asyncio.TimeoutError:
            await self._rollback()
            raise QueryTimeoutError(operation, self.query_timeout) from None
        except SQLAlchemyError as exc:
            await self._rollback()
            raise RepositoryUnavailableError(operation, _describe(exc)) from exc

    async def _rollback(self) -> None:
        # Some backends refuse further statements in a transaction after an error.
        try:
            await self.session.rollback()
        except SQLAlchemyError:
            logger.debug("Rollback after failed query did not complete", exc_info=True)

    def _without_bots(self, statement: Select) -> Select:
        return statement.outerjoin(
            UserGroup,
            and_(UserGroup.ug_user == User.user_id, UserGroup.ug_group == self.bot_group),
        ).where(UserGroup.ug_user.is_(None))

    async def has_column(self, name: str) -> bool:
        if name not in self._columns:
            try:
                await self._probe(name)
            except SchemaIncompatibleError as exc:
                logger.info("Using legacy query shape: %s", exc)
                self._columns[name] = False
            else:
                self._columns[name] = True
        return self._columns[name]

    async def _probe(self, name: str) -> None:
        column = OPTIONAL_COLUMNS[name]
        try:
            await self._execute(select(column).limit(1), operation=f"probe {name}")
        except RepositoryUnavailableError as exc:
            raise SchemaIncompatibleError(name) from exc

    async def top_by_edit_count(self, *, limit: int, offset: int, exclude_bots: bool) -> list[RankedRow]:
        statement = (
            select(User.user_id, User.user_name, User.user_editcount)
            .order_by(User.user_editcount.desc(), User.user_id)
            .limit(limit)
            .offset(offset)
        )
        if exclude_bots:
            statement = self._without_bots(statement)
        result = await self._execute(statement, operation="edit count ranking")
        return [RankedRow(row.user_id, row.user_name, row.user_editcount or 0) for row in result]

    async def top_by_revision_count(
        self,
        *,
        since: datetime | None,
        limit: int,
        offset: int,
        exclude_bots: bool,
    ) -> list[RankedRow]:
        # Users are outer joined so that a user without revisions in the
        # window is counted as zero.
        revision_join = Revision.rev_actor == Actor.actor_id
        if since is not None:
            revision_join = and_(revision_join, Revision.rev_timestamp >= since)

        edit_count = func.count(Revision.rev_id).label("edit_count")
        statement = (
            select(User.user_id, User.user_name, edit_count)
            .select_from(User)
            .outerjoin(Actor, Actor.actor_user == User.user_id)
            .outerjoin(Revision, revision_join)
            .group_by(User.user_id, User.user_name)
            .order_by(edit_count.desc(), User.user_id)
            .limit(limit)
            .offset(offset)
        )
        if exclude_bots:
            statement = self._without_bots(statement)
        result = await self._execute(statement, operation="revision count ranking")
        return [RankedRow(row.user_id, row.user_name, row.edit_count) for row in result]

    async def base_edit_counts(self, user_ids: Iterable[int]) -> dict[int, int]:
        ids = list(user_ids)
        if not ids:
            return {}
        statement = select(User.user_id, User.user_editcount).where(User.user_id.in_(ids))
        result = await self._execute(statement, operation="base edit counts")
        return {row.user_id: row.user_editcount or 0 for row in result}

    async def bot_group_members(self) -> set[int]:
        statement = select(UserGroup.ug_user).where(UserGroup.ug_group == self.bot_group)
        result = await self._execute(statement, operation="bot group lookup")
        return set(result.scalars().all())

    async def revisions_for(self, user_ids: Iterable[int], since: datetime | None) -> list[RevisionEvent]:
        ids = list(user_ids)
        if not ids:
            return []

        with_content_model = await self.has_column("page_content_model")
        statement = (
            select(
                Actor.actor_user,
                Revision.rev_len,
                Revision.rev_parent_id,
                Revision.rev_timestamp,
            )
            .select_from(Revision)
            .join(Actor, Revision.rev_actor == Actor.actor_id)
            .where(Actor.actor_user.in_(ids))
            .order_by(Revision.rev_timestamp.desc(), Revision.rev_id.desc())
            .limit(self.revision_cap)
        )
        if with_content_model:
            statement = statement.add_columns(Page.page_content_model).join(
                Page, Revision.rev_page == Page.page_id
            )
        if since is not None:
            statement = statement.where(Revision.rev_timestamp >= since)

        result = await self._execute(statement, operation="revision scan")
        events = [
            RevisionEvent(
                user_id=row.actor_user,
                is_new_page=not row.rev_parent_id,
                byte_length=row.rev_len or 0,
                content_model=row.page_content_model if with_content_model else None,
                timestamp=row.rev_timestamp,
            )
            for row in result
        ]
        if len(events) >= self.revision_cap:
            logger.warning("Revision scan truncated at %s rows for %s users", self.revision_cap, len(ids))
        return events

    async def uploads_for(self, user_ids: Iterable[int], since: datetime | None) -> dict[int, int]:
        ids = list(user_ids)
        if not ids:
            return {}

        if await self.has_column("img_actor"):
            owner = Actor.actor_user
            statement = select(owner, func.count().label("uploads")).select_from(Image).join(
                Actor, Image.img_actor == Actor.actor_id
            )
        else:
            owner = Image.img_user
            statement = select(owner, func.count().label("uploads")).select_from(Image)

        statement = statement.where(owner.in_(ids)).group_by(owner)
        if since is not None:
            statement = statement.where(Image.img_timestamp >= since)

        result = await self._execute(statement, operation="upload counts")
        return {row[0]: row.uploads for row in result}

    async def display_names(self, user_ids: Iterable[int]) -> dict[int, str]:
        ids = list(user_ids)
        if not ids:
            return {}
        statement = select(User.user_id, User.user_name).where(User.user_id.in_(ids))
        result = await self._execute(statement, operation="display names")
        return {row.user_id: row.user_name for row in result}
