"""ORM 基类"""
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
