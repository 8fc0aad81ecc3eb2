from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class Page(SQLModel, table=True):
    __tablename__ = "page"

    page_id: int | None = Field(default=None, primary_key=True)
    page_namespace: int = Field(default=0)
    page_title: str
    # Older wiki schemas do not carry this column.
    page_content_model: str | None = Field(default=None)
    page_len: int = Field(default=0)


class Revision(SQLModel, table=True):
    __tablename__ = "revision"

    rev_id: int | None = Field(default=None, primary_key=True)
    rev_page: int = Field(foreign_key="page.page_id", index=True)
    rev_actor: int = Field(foreign_key="actor.actor_id", index=True)
    # Wiki timestamps are naive UTC.
    rev_timestamp: datetime = Field(sa_type=DateTime, index=True)
    rev_len: int | None = Field(default=None)
    rev_parent_id: int | None = Field(default=None)
