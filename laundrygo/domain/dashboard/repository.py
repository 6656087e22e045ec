"""Dashboard repository - order points across working and archived orders"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import ActivityLog, Order, OrderHistory, ShopMethod
from .analytics import OrderPoint, customer_key


class DashboardRepository:
    """Read-only queries backing the owner dashboard"""

    @staticmethod
    def order_points(db: Session, branch_ids: list[int], start: datetime, end: datetime) -> list[OrderPoint]:
        """Working orders placed inside the window plus orders completed inside it"""
        if not branch_ids:
            return []

        working = (
            db.query(Order.created_at, Order.amount, ShopMethod.code, Order.customer_id, Order.customer_name,
                     Order.customer_contact)
            .join(ShopMethod, Order.method_id == ShopMethod.id)
            .filter(Order.branch_id.in_(branch_ids), Order.created_at >= start, Order.created_at <= end)
            .all()
        )
        archived = (
            db.query(
                OrderHistory.completed_at,
                OrderHistory.amount,
                OrderHistory.method_code,
                OrderHistory.customer_id,
                OrderHistory.customer_name,
                OrderHistory.customer_contact,
            )
            .filter(
                OrderHistory.branch_id.in_(branch_ids),
                OrderHistory.completed_at >= start,
                OrderHistory.completed_at <= end,
            )
            .all()
        )

        return [
            OrderPoint(at=at, amount=amount, method_code=code, customer_key=customer_key(cid, name, contact))
            for at, amount, code, cid, name, contact in [*working, *archived]
        ]

    @staticmethod
    def customers_before(db: Session, branch_ids: list[int], start: datetime) -> set:
        """Keys of customers who ordered before ``start``"""
        if not branch_ids:
            return set()

        rows = (
            db.query(Order.customer_id, Order.customer_name, Order.customer_contact)
            .filter(Order.branch_id.in_(branch_ids), Order.created_at < start)
            .all()
        )
        rows += (
            db.query(OrderHistory.customer_id, OrderHistory.customer_name, OrderHistory.customer_contact)
            .filter(OrderHistory.branch_id.in_(branch_ids), OrderHistory.ordered_at < start)
            .all()
        )
        return {customer_key(cid, name, contact) for cid, name, contact in rows}

    @staticmethod
    def list_activity(db: Session, shop_id: int, branch_id: Optional[int], limit: int) -> list[ActivityLog]:
        query = db.query(ActivityLog).filter(ActivityLog.shop_id == shop_id)
        if branch_id is not None:
            query = query.filter(ActivityLog.branch_id == branch_id)
        return query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc()).limit(limit).all()
