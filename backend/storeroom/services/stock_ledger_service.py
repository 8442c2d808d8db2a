"""Stock Ledger - the only writer of stock balances.

Every quantity change goes through ``StockLedger.adjust``, which:
1. Re-reads the item's stock row under a row lock (SELECT ... FOR UPDATE),
   refreshing any copy already held by the session
2. Computes the new balance and rejects anything that would go negative
3. Writes the new quantity and appends an immutable StockMovement whose
   balance_after is the quantity just written

The ledger never commits. The caller's unit of work decides whether the
adjustment becomes visible, so a failure later in the same transaction
undoes it together with everything else.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from storeroom.core.exceptions import (
    InsufficientStockError,
    ItemNotFoundError,
    ValidationFailedError,
)
from storeroom.models.stock import MovementType, ReferenceType, Stock, StockMovement

logger = logging.getLogger(__name__)

Quantity = Union[Decimal, int, str]

# Every quantity column is Numeric(12, 2)
QUANTITY_STEP = Decimal("0.01")


def fits_quantity_scale(quantity: Decimal) -> bool:
    """True when ``quantity`` can be stored without rounding."""
    try:
        return quantity == quantity.quantize(QUANTITY_STEP)
    except InvalidOperation:
        return False


@dataclass(frozen=True)
class BalanceCheck:
    """Result of comparing a stock row with its movement history."""

    item_id: int
    quantity: Decimal
    ledger_total: Decimal
    movement_count: int

    @property
    def consistent(self) -> bool:
        return self.quantity == self.ledger_total


class StockLedger:
    """Atomic stock adjustments with balance snapshotting."""

    def __init__(self, db: Session):
        self.db = db

    def open_stock(self, item_id: int) -> Stock:
        """Create the zero-quantity stock row for a newly created item."""
        stock = Stock(
            item_id=item_id,
            quantity=Decimal("0"),
            last_updated=datetime.now(timezone.utc),
        )
        self.db.add(stock)
        self.db.flush()
        return stock

    def get_balance(self, item_id: int) -> Decimal:
        """Current quantity without taking a lock. Raises ItemNotFoundError."""
        quantity = self.db.execute(
            select(Stock.quantity).where(Stock.item_id == item_id)
        ).scalar_one_or_none()
        if quantity is None:
            raise ItemNotFoundError(item_id)
        return quantity

    def adjust(
        self,
        item_id: int,
        signed_delta: Quantity,
        reference_type: ReferenceType,
        reference_id: int,
        performed_by: Optional[int],
        reason: str,
        movement_date: date,
    ) -> Decimal:
        """Apply ``signed_delta`` to the item's stock and record the movement.

        Returns the new balance. Raises ItemNotFoundError when the item has no
        stock row, InsufficientStockError when the balance would go negative,
        ValidationFailedError for a zero delta or one finer than QUANTITY_STEP.
        """
        delta = Decimal(str(signed_delta))
        if delta == 0:
            raise ValidationFailedError("Stock adjustment must be non-zero", field="quantity")
        if not fits_quantity_scale(delta):
            raise ValidationFailedError(
                f"Stock adjustment {delta} has more than two decimal places", field="quantity"
            )

        stock = self._lock_stock(item_id)
        current = stock.quantity
        new_balance = current + delta
        if new_balance < 0:
            raise InsufficientStockError(item_id=item_id, available=current, requested=-delta)

        stock.quantity = new_balance
        stock.last_updated = datetime.now(timezone.utc)

        movement = StockMovement(
            item_id=item_id,
            movement_type=(MovementType.IN if delta > 0 else MovementType.OUT).value,
            quantity=abs(delta),
            balance_after=new_balance,
            reference_type=ReferenceType(reference_type).value,
            reference_id=reference_id,
            performed_by=performed_by,
            reason=reason,
            movement_date=movement_date,
        )
        self.db.add(movement)
        self.db.flush()

        logger.debug(
            f"Stock adjusted: item={item_id} delta={delta} balance {current} -> {new_balance} "
            f"({movement.reference_type} {reference_id})"
        )
        return new_balance

    def verify_balance(self, item_id: int) -> BalanceCheck:
        """Recompute the signed movement total for an item and compare it with stock."""
        quantity = self.get_balance(item_id)
        signed = case(
            (StockMovement.movement_type == MovementType.IN.value, StockMovement.quantity),
            else_=-StockMovement.quantity,
        )
        total, count = self.db.execute(
            select(func.coalesce(func.sum(signed), 0), func.count(StockMovement.id))
            .where(StockMovement.item_id == item_id)
        ).one()
        return BalanceCheck(
            item_id=item_id,
            quantity=Decimal(str(quantity)),
            ledger_total=Decimal(str(total)),
            movement_count=count,
        )

    def _lock_stock(self, item_id: int) -> Stock:
        # populate_existing: a Stock already in the identity map (e.g. from an
        # unlocked availability check) must be overwritten with the locked row.
        stock = self.db.execute(
            select(Stock)
            .where(Stock.item_id == item_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if stock is None:
            raise ItemNotFoundError(item_id)
        return stock
