from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every table carries a property_id column: all reads and writes are scoped
    by an explicit property, never by ambient session state.
    """

    pass
