from typing import List, Optional
from datetime import datetime
from sqlalchemy.orm import Session

from src.exceptions import NotFoundError
from src.logger_config import logger
from src.models import SeatReconciliation

class AdminManagementService:
    """Review of seat counts that a failed release left out of step"""

    def __init__(self, db: Session):
        self.db = db

    def list_reconciliations(self, resolved: Optional[bool] = None) -> List[SeatReconciliation]:
        query = self.db.query(SeatReconciliation)
        if resolved is not None:
            query = query.filter(SeatReconciliation.resolved == resolved)
        return query.order_by(SeatReconciliation.created_at.desc(), SeatReconciliation.id.desc()).all()

    def resolve_reconciliation(self, reconciliation_id: int, resolved_by: str) -> SeatReconciliation:
        """Mark a flagged route as fixed by hand"""

        item = self.db.get(SeatReconciliation, reconciliation_id)
        if not item:
            raise NotFoundError("Reconciliation entry not found")

        if not item.resolved:
            item.resolved = True
            item.resolved_at = datetime.now()
            self.db.commit()
            self.db.refresh(item)
            logger.info(f"Reconciliation {reconciliation_id} on route {item.bus_route} resolved by {resolved_by}")

        return item
