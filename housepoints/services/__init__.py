"""
Service layer for House Points.
"""
from .transactions import transaction_scope
from .notification_service import NotificationService, EventTypes, publish_event
from .ledger_service import LedgerService
from .balance_service import BalanceService, Balance, calculate_balance
from .redemption_service import RedemptionService
from .reconciliation_service import (
    ReconciliationService,
    ReconcileResult,
    LedgerRow,
    compute_house_total,
    compute_house_totals,
)
from .bulk_ledger_service import BulkLedgerService
from .roster_service import RosterService
