from .user import Actor, User, UserGroup
from .revision import Page, Revision
from .image import Image

__all__ = [
    "User",
    "UserGroup",
    "Actor",
    "Page",
    "Revision",
    "Image",
]
