from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    __tablename__ = "user"

    user_id: int | None = Field(default=None, primary_key=True)
    user_name: str = Field(index=True, unique=True)
    user_editcount: int = Field(default=0, index=True)
    user_registration: datetime | None = Field(default=None, sa_type=DateTime)


class UserGroup(SQLModel, table=True):
    __tablename__ = "user_groups"

    ug_user: int = Field(foreign_key="user.user_id", primary_key=True)
    ug_group: str = Field(primary_key=True)
    ug_expiry: datetime | None = Field(default=None, sa_type=DateTime)


class Actor(SQLModel, table=True):
    """
    Attribution record shared by revisions and uploads. Anonymous editors
    have an actor row without a user.
    """

    __tablename__ = "actor"

    actor_id: int | None = Field(default=None, primary_key=True)
    actor_user: int | None = Field(default=None, foreign_key="user.user_id", index=True)
    actor_name: str = Field(index=True, unique=True)
