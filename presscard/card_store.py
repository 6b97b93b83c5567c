"""
Card Store - durable collection of card records

Each card is its own row, so writers never rewrite the whole collection.
Mutations are additionally serialized by a process-wide lock; concurrent
issuance and admin updates touch different rows and never lose each other's
changes.

Card IDs are claimed in a reservation table before an issuance renders,
publishes or mints anything. The unique index on reservations makes the claim
atomic across threads and worker processes.
"""

import threading
from datetime import timedelta

from sqlalchemy.exc import IntegrityError

from presscard import db
from presscard.errors import DuplicateCardId
from presscard.models import CardIdReservation, CardRecord
from presscard.utils import utcnow

_write_lock = threading.Lock()

# Columns that identify a record and are never merged by update()
_IMMUTABLE = ('id', 'card_id')


class CardStore:
    """Create/read/update-by-id over CardRecord rows"""

    def get_all(self):
        """All cards in insertion order"""
        return CardRecord.query.order_by(CardRecord.id.asc()).all()

    def get(self, card_id):
        return CardRecord.query.filter_by(card_id=card_id).first()

    def existing_ids(self):
        """Fresh read of every card ID stored or reserved"""
        stored = db.session.execute(db.select(CardRecord.card_id)).scalars()
        reserved = db.session.execute(db.select(CardIdReservation.card_id)).scalars()
        return set(stored) | set(reserved)

    def count(self):
        return db.session.execute(db.select(db.func.count(CardRecord.id))).scalar_one()

    def reserve(self, card_id):
        """
        Claim card_id for an issuance in progress.

        Returns False when another issuance already holds the ID.
        """
        with _write_lock:
            db.session.add(CardIdReservation(card_id=card_id, created_at=utcnow()))
            try:
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                return False
        return True

    def release(self, card_id):
        """Give up a claim whose issuance failed before its record was stored"""
        with _write_lock:
            db.session.execute(db.delete(CardIdReservation).where(CardIdReservation.card_id == card_id))
            db.session.commit()

    def add(self, record):
        """
        Persist a new card.

        Card ID uniqueness is the allocator's job; the unique index only turns
        a lost race into DuplicateCardId instead of a second row.
        """
        with _write_lock:
            now = utcnow()
            if record.created_at is None:
                record.created_at = now
            if record.updated_at is None:
                record.updated_at = record.created_at
            db.session.add(record)
            try:
                db.session.commit()
            except IntegrityError as exc:
                db.session.rollback()
                raise DuplicateCardId(f'Card ID {record.card_id} already exists') from exc
        return record

    def update(self, card_id, fields):
        """
        Shallow-merge fields over the stored card and stamp updated_at.

        Returns the merged record, or None if no card has this ID (nothing is
        written in that case).
        """
        unknown = [name for name in fields if name in _IMMUTABLE or name not in CardRecord.__table__.columns.keys()]
        if unknown:
            raise ValueError(f"Cannot update card fields: {', '.join(sorted(unknown))}")

        with _write_lock:
            # Merge over the committed row, not a copy cached earlier in this session
            record = CardRecord.query.filter_by(card_id=card_id).populate_existing().first()
            if record is None:
                return None

            for name, value in fields.items():
                if name == 'updated_at':
                    continue
                setattr(record, name, value)
            record.updated_at = _next_timestamp(record.updated_at)
            try:
                db.session.commit()
            except Exception:
                db.session.rollback()
                raise
        return record


def _next_timestamp(previous):
    now = utcnow()
    if previous is not None and now <= previous:
        # Clock resolution (or skew) must not make updated_at stand still
        now = previous + timedelta(microseconds=1)
    return now


card_store = CardStore()
