from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class Image(SQLModel, table=True):
    __tablename__ = "image"

    img_name: str = Field(primary_key=True)
    # Current schemas attribute uploads through the actor table, legacy ones
    # through img_user directly.
    img_actor: int | None = Field(default=None, foreign_key="actor.actor_id", index=True)
    img_user: int | None = Field(default=None, index=True)
    img_timestamp: datetime = Field(sa_type=DateTime, index=True)
    img_size: int = Field(default=0)
