from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from contribboard.models import Actor, Image, Page, Revision, User, UserGroup

NOW = datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


def days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)


class WikiBuilder:
    """Seeds wiki rows the way the wiki itself writes them."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.actors: dict[int, int] = {}
        self._latest_revision: dict[int, int] = {}

    async def user(self, name: str, *, editcount: int = 0, bot: bool = False) -> int:
        user = User(user_name=name, user_editcount=editcount)
        self.session.add(user)
        await self.session.flush()
        actor = Actor(actor_user=user.user_id, actor_name=name)
        self.session.add(actor)
        await self.session.flush()
        self.actors[user.user_id] = actor.actor_id
        if bot:
            self.session.add(UserGroup(ug_user=user.user_id, ug_group="bot"))
        return user.user_id

    async def page(self, title: str, *, content_model: str | None = "wikitext") -> int:
        page = Page(page_title=title, page_content_model=content_model)
        self.session.add(page)
        await self.session.flush()
        return page.page_id

    async def revision(self, user_id: int, page_id: int, *, length: int, at: datetime) -> int:
        # The first revision of a page has no parent, which marks a page creation.
        revision = Revision(
            rev_page=page_id,
            rev_actor=self.actors[user_id],
            rev_timestamp=at,
            rev_len=length,
            rev_parent_id=self._latest_revision.get(page_id, 0),
        )
        self.session.add(revision)
        await self.session.flush()
        self._latest_revision[page_id] = revision.rev_id
        return revision.rev_id

    async def upload(self, user_id: int, name: str, *, at: datetime) -> None:
        self.session.add(
            Image(
                img_name=name,
                img_actor=self.actors[user_id],
                img_user=user_id,
                img_timestamp=at,
            )
        )
        await self.session.flush()


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'wiki.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def wiki(session_factory) -> dict[str, int]:
    """
    A small wiki:

    * alice: 120 lifetime edits, created a page and made a large edit 3 days ago
    * bob: 80 lifetime edits, nothing recent
    * botty: 1000 lifetime edits, member of the bot group, busy yesterday
    * carol: 500 lifetime edits, worked on a script page 100 days ago
    * dave: 50 lifetime edits, created a page, made a medium edit and
      uploaded a file 5 days ago
    """
    async with session_factory() as session:
        builder = WikiBuilder(session)
        alice = await builder.user("Alice", editcount=120)
        bob = await builder.user("Bob", editcount=80)
        botty = await builder.user("Botty", editcount=1000, bot=True)
        carol = await builder.user("Carol", editcount=500)
        dave = await builder.user("Dave", editcount=50)

        notes = await builder.page("Alice notes")
        await builder.revision(alice, notes, length=80, at=days_ago(3))
        await builder.revision(alice, notes, length=1500, at=days_ago(3))

        script = await builder.page("Common.js", content_model="javascript")
        await builder.revision(carol, script, length=2000, at=days_ago(100))
        await builder.revision(carol, script, length=2400, at=days_ago(100))

        garden = await builder.page("Garden")
        await builder.revision(dave, garden, length=40, at=days_ago(5))
        await builder.revision(dave, garden, length=500, at=days_ago(5))
        await builder.upload(dave, "Rose.jpg", at=days_ago(5))

        for index in range(3):
            await builder.revision(botty, garden, length=600 + index, at=days_ago(1))
        await builder.upload(botty, "Chart.png", at=days_ago(1))

        await session.commit()

    return {"alice": alice, "bob": bob, "botty": botty, "carol": carol, "dave": dave}
