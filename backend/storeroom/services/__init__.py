# Services module

from storeroom.services.stock_ledger_service import BalanceCheck, StockLedger
from storeroom.services.stock_transaction_service import StockTransactionService

__all__ = [
    "BalanceCheck",
    "StockLedger",
    "StockTransactionService",
]
