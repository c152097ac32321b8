from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint

from storefront.data.database import Base


class IdentifierReservationModel(Base):
    """One row per code ever handed out. The unique constraint is the lock."""

    __tablename__ = "identifier_reservations"

    id = Column(Integer, primary_key=True)
    kind = Column(String(20), nullable=False)
    code = Column(String(32), nullable=False)
    reserved_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (UniqueConstraint("kind", "code", name="u_identifier_kind_code"),)
