"""Stock Transaction Service - receipts (GRNs) and issues as single transactions.

Flow for a receipt:
1. Validate header and lines (number present, lines present, quantities > 0
   with at most two decimal places)
2. Open a unit of work
3. Reject a grn_number already in use, resolve every referenced item
4. Insert the GRN header, then for each line in submitted order:
   - insert the GrnItem
   - StockLedger.adjust(+quantity) -> stock row + IN movement
5. Commit; any failure rolls back header, lines, stock and movements together

Flow for an issue:
1-2. As above, plus the department must exist and be active
3. Availability check: read current stock for every line before writing
   anything, and fail fast with InsufficientStockError naming the item.
   Duplicate item lines are checked against their combined quantity.
4. Insert the StockIssue header (status "issued"), then for each line:
   - insert the StockIssueItem (requested == issued, no partial fulfilment)
   - StockLedger.adjust(-quantity) -> stock row + OUT movement
5. Commit or roll back as a unit

The availability check is a fast-fail only. Another transaction can issue the
same item between the check and the write; the locked re-read inside
StockLedger.adjust is what actually prevents overselling.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storeroom.core.exceptions import (
    DuplicateNumberError,
    InsufficientStockError,
    ItemNotFoundError,
    StockError,
    ValidationFailedError,
)
from storeroom.core.metrics import metrics
from storeroom.db.session import is_unique_violation, unit_of_work
from storeroom.models.department import Department
from storeroom.models.grn import GoodsReceivedNote, GrnItem
from storeroom.models.issue import IssueStatus, StockIssue, StockIssueItem
from storeroom.models.item import Item
from storeroom.models.stock import ReferenceType
from storeroom.models.supplier import Supplier
from storeroom.schemas.grn import GRNHeader, GrnLineCreate
from storeroom.schemas.issue import IssueLineCreate, StockIssueHeader
from storeroom.services.stock_ledger_service import StockLedger, fits_quantity_scale

logger = logging.getLogger(__name__)


class StockTransactionService:
    """Coordinates multi-line receipts and issues as all-or-nothing transactions."""

    def __init__(self, db: Session):
        self.db = db
        self.ledger = StockLedger(db)

    # ===== RECEIPTS =====

    def receive(
        self,
        header: GRNHeader,
        lines: Sequence[GrnLineCreate],
        performed_by: Optional[int],
    ) -> GoodsReceivedNote:
        """Record a goods received note and add every line to stock."""
        try:
            grn_number = self._require_number(header.grn_number, "grn_number")
            if header.received_date is None:
                raise ValidationFailedError("received_date is required", field="received_date")
            quantities = self._require_quantities(lines)

            with unit_of_work(self.db):
                self._ensure_unused(GoodsReceivedNote, GoodsReceivedNote.grn_number, "GRN", grn_number)
                if header.supplier_id is not None and self.db.get(Supplier, header.supplier_id) is None:
                    raise ValidationFailedError(
                        f"Supplier {header.supplier_id} not found", field="supplier_id"
                    )
                self._require_items(line.item_id for line in lines)

                grn = GoodsReceivedNote(
                    grn_number=grn_number,
                    supplier_id=header.supplier_id,
                    delivery_note_number=header.delivery_note_number,
                    received_date=header.received_date,
                    received_by=performed_by,
                    notes=header.notes,
                )
                self.db.add(grn)
                self._flush_header("GRN", "grn_number", grn_number)

                for line, quantity in zip(lines, quantities):
                    self.db.add(GrnItem(
                        grn_id=grn.id,
                        item_id=line.item_id,
                        quantity=quantity,
                        expiry_date=line.expiry_date,
                        batch_number=line.batch_number,
                        notes=line.notes,
                    ))
                    self.ledger.adjust(
                        item_id=line.item_id,
                        signed_delta=quantity,
                        reference_type=ReferenceType.GRN,
                        reference_id=grn.id,
                        performed_by=performed_by,
                        reason=f"GRN {grn_number}",
                        movement_date=header.received_date,
                    )
        except StockError as e:
            self._record_failure("receipt", header.grn_number, e)
            raise

        metrics.record_stock_transaction("receipt", "committed", lines=len(lines))
        logger.info(f"GRN {grn_number} committed: {len(lines)} line(s), received by user {performed_by}")
        return grn

    # ===== ISSUES =====

    def issue(
        self,
        header: StockIssueHeader,
        lines: Sequence[IssueLineCreate],
        performed_by: Optional[int],
    ) -> StockIssue:
        """Record a stock issue to a department and remove every line from stock."""
        try:
            issue_number = self._require_number(header.issue_number, "issue_number")
            if header.issue_date is None:
                raise ValidationFailedError("issue_date is required", field="issue_date")
            quantities = self._require_quantities(lines)

            with unit_of_work(self.db):
                self._ensure_unused(StockIssue, StockIssue.issue_number, "Issue", issue_number)
                department = self.db.get(Department, header.department_id)
                if department is None or not department.is_active:
                    raise ValidationFailedError(
                        f"Department {header.department_id} not found or inactive",
                        field="department_id",
                    )
                self._require_items(line.item_id for line in lines)

                self._check_availability(lines, quantities)

                issue = StockIssue(
                    issue_number=issue_number,
                    department_id=header.department_id,
                    issued_to_person=header.issued_to_person,
                    issued_by=performed_by,
                    issue_date=header.issue_date,
                    purpose=header.purpose,
                    status=IssueStatus.ISSUED.value,
                    notes=header.notes,
                )
                self.db.add(issue)
                self._flush_header("Issue", "issue_number", issue_number)

                reason = f"Issue {issue_number} to {header.issued_to_person}"
                for line, quantity in zip(lines, quantities):
                    self.db.add(StockIssueItem(
                        issue_id=issue.id,
                        item_id=line.item_id,
                        quantity_requested=quantity,
                        quantity_issued=quantity,
                    ))
                    self.ledger.adjust(
                        item_id=line.item_id,
                        signed_delta=-quantity,
                        reference_type=ReferenceType.ISSUE,
                        reference_id=issue.id,
                        performed_by=performed_by,
                        reason=reason,
                        movement_date=header.issue_date,
                    )
        except StockError as e:
            self._record_failure("issue", header.issue_number, e)
            raise

        metrics.record_stock_transaction("issue", "committed", lines=len(lines))
        logger.info(
            f"Issue {issue_number} committed: {len(lines)} line(s) to department "
            f"{header.department_id}, issued by user {performed_by}"
        )
        return issue

    # ===== HELPERS =====

    def _check_availability(self, lines: Sequence[IssueLineCreate], quantities: Sequence[Decimal]) -> None:
        """Fail before any write if a line asks for more than is on hand."""
        demand: Dict[int, Decimal] = {}
        for line, quantity in zip(lines, quantities):
            available = self.ledger.get_balance(line.item_id)
            demand[line.item_id] = demand.get(line.item_id, Decimal("0")) + quantity
            if demand[line.item_id] > available:
                raise InsufficientStockError(
                    item_id=line.item_id,
                    available=available,
                    requested=demand[line.item_id],
                )

    def _require_items(self, item_ids: Iterable[int]) -> None:
        ids = list(item_ids)
        found = set(self.db.execute(select(Item.id).where(Item.id.in_(set(ids)))).scalars())
        for item_id in ids:
            if item_id not in found:
                raise ItemNotFoundError(item_id)

    def _ensure_unused(self, model, column, document_type: str, number: str) -> None:
        if self.db.execute(select(model.id).where(column == number)).first() is not None:
            raise DuplicateNumberError(document_type, number)

    def _flush_header(self, document_type: str, column: str, number: str) -> None:
        # A concurrent request can take the number between the lookup and the insert.
        # Any other constraint failure stays a store error.
        try:
            self.db.flush()
        except IntegrityError as e:
            if is_unique_violation(e, column):
                raise DuplicateNumberError(document_type, number) from e
            raise

    @staticmethod
    def _require_number(number: Optional[str], field: str) -> str:
        value = (number or "").strip()
        if not value:
            raise ValidationFailedError(f"{field} must not be empty", field=field)
        return value

    @staticmethod
    def _require_quantities(lines: Sequence) -> List[Decimal]:
        if not lines:
            raise ValidationFailedError("At least one line item is required", field="items")
        quantities = []
        for index, line in enumerate(lines):
            try:
                quantity = Decimal(str(line.quantity))
            except (InvalidOperation, TypeError, ValueError):
                raise ValidationFailedError(
                    f"Line {index + 1}: quantity is not a number", field=f"items[{index}].quantity"
                )
            if not quantity.is_finite() or quantity <= 0:
                raise ValidationFailedError(
                    f"Line {index + 1}: quantity must be greater than zero",
                    field=f"items[{index}].quantity",
                )
            if not fits_quantity_scale(quantity):
                raise ValidationFailedError(
                    f"Line {index + 1}: quantity has more than two decimal places",
                    field=f"items[{index}].quantity",
                )
            quantities.append(quantity)
        return quantities

    @staticmethod
    def _record_failure(kind: str, number: Optional[str], error: StockError) -> None:
        metrics.record_stock_transaction(kind, error.code)
        logger.warning(f"{kind.capitalize()} {number!r} rolled back: {error.code}: {error}")
