"""Shared base for persistent domain entities"""

from uuid import uuid4
from sqlalchemy import BigInteger, Integer
from sqlmodel import SQLModel

# SQLite only auto-increments INTEGER PRIMARY KEY columns
BigIntegerId = BigInteger().with_variant(Integer(), "sqlite")


def generate_uuid() -> str:
    return str(uuid4())


class BaseModel(SQLModel):
    pass
