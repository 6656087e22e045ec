"""Dashboard service - sales analytics and the activity feed for owners"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import OwnerContext
from ...models import ActivityLog, utcnow
from ..branches.repository import BranchRepository
from ..branches.service import BranchService
from .analytics import summarize, window_start
from .repository import DashboardRepository

logger = logging.getLogger(__name__)


def serialize_activity(entry: ActivityLog) -> dict:
    return {
        "id": entry.id,
        "branch_id": entry.branch_id,
        "actor_name": entry.actor_name,
        "actor_type": entry.actor_type,
        "action": entry.action,
        "entity_type": entry.entity_type,
        "entity_id": entry.entity_id,
        "entity_name": entry.entity_name,
        "description": entry.description,
        "severity": entry.severity,
        "created_at": entry.created_at,
    }


class DashboardService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = DashboardRepository()
        self.branches = BranchService(db)

    def _scope(self, owner: OwnerContext, branch_id: Optional[int]) -> tuple[list[int], Optional[dict]]:
        """Branch ids to aggregate: one owned branch, or every active branch of the shop"""
        if branch_id is not None:
            branch = self.branches.get_owner_branch(owner, branch_id)
            return [branch.id], {"id": branch.id, "name": branch.name}

        active = BranchRepository.list_shop_branches(self.db, owner.shop.id, active_only=True)
        return [b.id for b in active], None

    def get_dashboard(
        self, owner: OwnerContext, period: str, branch_id: Optional[int], now: Optional[datetime] = None
    ) -> dict:
        now = now or utcnow()
        start = window_start(period, now)
        branch_ids, selected = self._scope(owner, branch_id)

        points = self.repo.order_points(self.db, branch_ids, start, now)
        returning = self.repo.customers_before(self.db, branch_ids, start)
        logger.info(
            f"📊 Dashboard for shop {owner.shop.id} ({period}): {len(points)} orders across {len(branch_ids)} branches"
        )

        data = summarize(period, points, returning, now)
        data.update(
            {
                "shop": {"id": owner.shop.id, "name": owner.shop.name},
                "selectedBranch": selected,
                "totalBranches": len(branch_ids),
                "dateRange": {"start": start, "end": now},
            }
        )
        return data

    def get_activity_logs(self, owner: OwnerContext, limit: int, branch_id: Optional[int]) -> dict:
        if branch_id is not None:
            self.branches.get_owner_branch(owner, branch_id)
        entries = self.repo.list_activity(self.db, owner.shop.id, branch_id, limit)
        return {"logs": [serialize_activity(e) for e in entries]}
