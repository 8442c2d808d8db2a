"""Tests for the stock ledger: adjustments, snapshots, immutability."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from storeroom.core.exceptions import (
    ImmutableMovementError,
    InsufficientStockError,
    ItemNotFoundError,
    ValidationFailedError,
)
from storeroom.models.stock import MovementType, ReferenceType, Stock, StockMovement
from storeroom.services.stock_ledger_service import StockLedger


def _adjust(ledger, item_id, delta, reference_id=1):
    return ledger.adjust(
        item_id=item_id,
        signed_delta=Decimal(str(delta)),
        reference_type=ReferenceType.GRN if Decimal(str(delta)) > 0 else ReferenceType.ISSUE,
        reference_id=reference_id,
        performed_by=None,
        reason="test",
        movement_date=date(2024, 3, 1),
    )


class TestOpenStock:
    def test_new_item_starts_at_zero(self, db_session, item_b):
        ledger = StockLedger(db_session)
        assert ledger.get_balance(item_b.id) == Decimal("0")

    def test_unknown_item_has_no_balance(self, db_session):
        with pytest.raises(ItemNotFoundError) as exc_info:
            StockLedger(db_session).get_balance(9999)
        assert exc_info.value.item_id == 9999


class TestAdjust:
    def test_increase_records_in_movement(self, db_session, item_b):
        ledger = StockLedger(db_session)
        new_balance = _adjust(ledger, item_b.id, 7)
        db_session.commit()

        assert new_balance == Decimal("7")
        movement = db_session.execute(
            select(StockMovement).where(StockMovement.item_id == item_b.id)
        ).scalar_one()
        assert movement.movement_type == MovementType.IN.value
        assert movement.quantity == Decimal("7")
        assert movement.balance_after == Decimal("7")
        assert movement.movement_date == date(2024, 3, 1)

    def test_decrease_records_out_movement(self, db_session, item_a):
        ledger = StockLedger(db_session)
        new_balance = _adjust(ledger, item_a.id, -4, reference_id=2)
        db_session.commit()

        assert new_balance == Decimal("6")
        movement = db_session.execute(
            select(StockMovement)
            .where(StockMovement.item_id == item_a.id)
            .order_by(StockMovement.id.desc())
        ).scalars().first()
        assert movement.movement_type == MovementType.OUT.value
        assert movement.quantity == Decimal("4")
        assert movement.balance_after == Decimal("6")
        assert movement.signed_quantity == Decimal("-4")

    def test_decrease_to_exactly_zero_allowed(self, db_session, item_a):
        new_balance = _adjust(StockLedger(db_session), item_a.id, -10)
        db_session.commit()
        assert new_balance == Decimal("0")

    def test_overdraw_rejected_without_writing(self, db_session, item_a):
        ledger = StockLedger(db_session)
        movements_before = db_session.scalar(select(func.count(StockMovement.id)))

        with pytest.raises(InsufficientStockError) as exc_info:
            _adjust(ledger, item_a.id, -11)
        db_session.rollback()

        assert exc_info.value.item_id == item_a.id
        assert exc_info.value.available == Decimal("10")
        assert exc_info.value.requested == Decimal("11")
        assert ledger.get_balance(item_a.id) == Decimal("10")
        assert db_session.scalar(select(func.count(StockMovement.id))) == movements_before

    def test_zero_delta_rejected(self, db_session, item_a):
        with pytest.raises(ValidationFailedError):
            _adjust(StockLedger(db_session), item_a.id, 0)

    def test_unknown_item_rejected(self, db_session):
        with pytest.raises(ItemNotFoundError):
            _adjust(StockLedger(db_session), 4242, 5)

    @pytest.mark.parametrize("delta", ["0.004", "-0.001", "1.005"])
    def test_sub_cent_delta_rejected(self, db_session, item_a, delta):
        with pytest.raises(ValidationFailedError):
            _adjust(StockLedger(db_session), item_a.id, delta)
        assert StockLedger(db_session).get_balance(item_a.id) == Decimal("10")

    def test_trailing_zeros_accepted(self, db_session, item_b):
        assert _adjust(StockLedger(db_session), item_b.id, "1.500") == Decimal("1.5")

    def test_fractional_quantities(self, db_session, item_b):
        ledger = StockLedger(db_session)
        _adjust(ledger, item_b.id, "2.50")
        balance = _adjust(ledger, item_b.id, "-0.75")
        db_session.commit()
        assert balance == Decimal("1.75")

    def test_does_not_commit(self, db_session, item_b):
        ledger = StockLedger(db_session)
        _adjust(ledger, item_b.id, 3)
        db_session.rollback()
        assert ledger.get_balance(item_b.id) == Decimal("0")

    def test_balance_after_tracks_each_step(self, db_session, item_b):
        ledger = StockLedger(db_session)
        for delta in (5, 3, -6, 10):
            _adjust(ledger, item_b.id, delta)
        db_session.commit()

        snapshots = db_session.execute(
            select(StockMovement.balance_after)
            .where(StockMovement.item_id == item_b.id)
            .order_by(StockMovement.id)
        ).scalars().all()
        assert snapshots == [Decimal("5"), Decimal("8"), Decimal("2"), Decimal("12")]

    def test_refreshes_stale_stock_in_session(self, db_session, item_a):
        stock = db_session.execute(select(Stock).where(Stock.item_id == item_a.id)).scalar_one()
        # Another writer changed the row behind this session's back
        db_session.execute(
            Stock.__table__.update().where(Stock.item_id == item_a.id).values(quantity=Decimal("3"))
        )
        assert stock.quantity == Decimal("10")

        with pytest.raises(InsufficientStockError) as exc_info:
            _adjust(StockLedger(db_session), item_a.id, -5)
        assert exc_info.value.available == Decimal("3")


class TestVerifyBalance:
    def test_consistent_after_activity(self, db_session, item_a):
        ledger = StockLedger(db_session)
        _adjust(ledger, item_a.id, -3)
        _adjust(ledger, item_a.id, 8)
        db_session.commit()

        check = ledger.verify_balance(item_a.id)
        assert check.quantity == Decimal("15")
        assert check.ledger_total == Decimal("15")
        assert check.movement_count == 3
        assert check.consistent

    def test_detects_drift(self, db_session, item_a):
        db_session.execute(
            Stock.__table__.update().where(Stock.item_id == item_a.id).values(quantity=Decimal("99"))
        )
        db_session.commit()

        check = StockLedger(db_session).verify_balance(item_a.id)
        assert not check.consistent
        assert check.ledger_total == Decimal("10")


class TestMovementImmutability:
    def _movement(self, db_session, item_id):
        return db_session.execute(
            select(StockMovement).where(StockMovement.item_id == item_id)
        ).scalars().first()

    def test_update_rejected(self, db_session, item_a):
        movement = self._movement(db_session, item_a.id)
        movement.quantity = Decimal("1")
        with pytest.raises(ImmutableMovementError):
            db_session.flush()
        db_session.rollback()

        assert self._movement(db_session, item_a.id).quantity == Decimal("10")

    def test_delete_rejected(self, db_session, item_a):
        movement = self._movement(db_session, item_a.id)
        db_session.delete(movement)
        with pytest.raises(ImmutableMovementError):
            db_session.flush()
        db_session.rollback()

        assert db_session.scalar(
            select(func.count(StockMovement.id)).where(StockMovement.item_id == item_a.id)
        ) == 1
