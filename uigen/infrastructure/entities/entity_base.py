"""Declarative base shared by all entities."""

from sqlalchemy.orm import DeclarativeBase


class EntityBase(DeclarativeBase):
    pass
