from sqlalchemy import Column, Integer, Numeric, String, Text

from .database import Base


class Room(Base):
    """
    SQLAlchemy model representing a bookable room.

    Attributes
    ----------
    id : str
        Opaque, stable primary key.
    name : str
        Display name (e.g. 'Ocean View').
    short_description : str
        One-line summary shown next to the name.
    long_description : str
        Full description shown on the detail page.
    price : float
        Non-negative price per night.
    capacity : int
        Number of persons the room sleeps.
    type : str
        Room category such as 'single', 'double' or 'suite'.
    """
    __tablename__ = "rooms"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    short_description = Column(String(255), nullable=False, default="")
    long_description = Column(Text, nullable=False, default="")
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    capacity = Column(Integer, nullable=False)
    type = Column(String(50), nullable=False)
