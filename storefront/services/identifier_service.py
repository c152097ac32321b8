# storefront/services/identifier_service.py
import random
from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from storefront.data.database import SessionLocal
from storefront.data.models.identifier import IdentifierReservationModel
from storefront.domain.errors import ConflictError, PersistenceError, ResourceExhaustedError
from storefront.utils.settings import IDENTIFIER_MAX_ATTEMPTS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class IdentifierGenerator:
    """
    Hands out short random codes (order, tracking, product, seller).

    A code is ours once its (kind, code) row is committed to
    identifier_reservations. The INSERT itself is the existence check:
    a unique-constraint violation means another caller got there first,
    so we draw again. Each reservation runs in its own short session, so
    it survives a rollback of the caller's transaction (the code is burned,
    never reused).
    """

    def __init__(
        self,
        session_factory: sessionmaker | None = None,
        rng: random.Random | None = None,
        max_attempts: int | None = None,
    ):
        self.session_factory = session_factory or SessionLocal
        self.rng = rng or random.SystemRandom()
        self.max_attempts = max_attempts or IDENTIFIER_MAX_ATTEMPTS

    def allocate(self, space) -> str:
        for attempt in range(1, self.max_attempts + 1):
            candidate = space.draw(self.rng)

            if self._reserve(space.kind, candidate):
                logger.info(f"Allocated {space.kind} id {candidate} (attempt {attempt})")
                return candidate

            logger.warning(f"Collision on {space.kind} id {candidate}, attempt {attempt}")

            if self.reserved_count(space.kind) >= space.capacity:
                raise ResourceExhaustedError(
                    f"No free {space.kind} identifiers left",
                    details={"kind": space.kind, "capacity": space.capacity},
                )

        raise ConflictError(
            f"Could not allocate a unique {space.kind} id after {self.max_attempts} attempts",
            details={"kind": space.kind},
        )

    def register_existing(self, space, codes: Iterable[str]) -> int:
        """
        Record codes that already live in the store so draws skip them.

        Codes outside the space can never be drawn, so they are not
        reserved and do not count towards its capacity.
        """
        added = 0
        for code in codes:
            if not space.contains(code):
                logger.warning(f"Existing {space.kind} id {code!r} is outside the code space, not reserved")
                continue
            if self._reserve(space.kind, code):
                added += 1
        if added:
            logger.info(f"Registered {added} existing {space.kind} ids")
        return added

    def reserved_count(self, kind: str) -> int:
        db = self.session_factory()
        try:
            return db.execute(
                select(func.count())
                .select_from(IdentifierReservationModel)
                .where(IdentifierReservationModel.kind == kind)
            ).scalar_one()
        finally:
            db.close()

    def _reserve(self, kind: str, code: str) -> bool:
        db = self.session_factory()
        try:
            db.add(IdentifierReservationModel(kind=kind, code=code))
            db.commit()
            return True
        except IntegrityError:
            db.rollback()
            return False
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Reservation of {kind} id failed: {e}")
            raise PersistenceError(f"Could not reserve a {kind} id") from e
        finally:
            db.close()
