"""Order repository - working orders, items and the completed archive"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import BranchMethod, Order, OrderHistory, OrderItem, ShopMethod, utcnow
from .workflow import WORKING_STATUSES

HISTORY_LIMIT = 50


class OrderRepository:
    """Repository for order database operations"""

    @staticmethod
    def get_order(db: Session, order_id: int) -> Optional[Order]:
        return db.query(Order).filter(Order.id == order_id).first()

    @staticmethod
    def list_branch_orders(db: Session, branch_id: int, statuses=WORKING_STATUSES) -> list[Order]:
        return (
            db.query(Order)
            .filter(Order.branch_id == branch_id, Order.order_status.in_(statuses))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    @staticmethod
    def list_orders_in_branches(db: Session, branch_ids: list[int], status: str) -> list[Order]:
        if not branch_ids:
            return []
        return (
            db.query(Order)
            .filter(Order.branch_id.in_(branch_ids), Order.order_status == status)
            .order_by(Order.updated_at.asc(), Order.id.asc())
            .all()
        )

    @staticmethod
    def list_customer_orders(db: Session, customer_id: int) -> list[Order]:
        return (
            db.query(Order)
            .filter(Order.customer_id == customer_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    @staticmethod
    def list_history(
        db: Session,
        branch_id: Optional[int] = None,
        customer_id: Optional[int] = None,
        limit: int = HISTORY_LIMIT,
    ) -> list[OrderHistory]:
        query = db.query(OrderHistory)
        if branch_id is not None:
            query = query.filter(OrderHistory.branch_id == branch_id)
        if customer_id is not None:
            query = query.filter(OrderHistory.customer_id == customer_id)
        return query.order_by(OrderHistory.completed_at.desc(), OrderHistory.id.desc()).limit(limit).all()

    @staticmethod
    def get_enabled_method(db: Session, branch_id: int, code: str) -> Optional[ShopMethod]:
        branch_method = (
            db.query(BranchMethod)
            .join(ShopMethod, BranchMethod.method_id == ShopMethod.id)
            .filter(
                BranchMethod.branch_id == branch_id,
                ShopMethod.code == code,
                BranchMethod.is_enabled.is_(True),
            )
            .first()
        )
        return branch_method.method if branch_method else None

    @staticmethod
    def create_order(db: Session, **order_data) -> Order:
        order = Order(order_status="pending", **order_data)
        db.add(order)
        db.commit()
        db.refresh(order)
        return order

    # ========================================================================
    # GUARDED TRANSITIONS
    # ========================================================================

    @staticmethod
    def compare_and_set_status(db: Session, order_id: int, expected: str, new_status: str, **values) -> bool:
        """
        Move an order from ``expected`` to ``new_status`` in a single conditional UPDATE.

        Returns False when the row is no longer in ``expected`` (another request got there
        first). The caller commits or rolls back.
        """
        values.update({"order_status": new_status, "updated_at": utcnow()})
        updated = (
            db.query(Order)
            .filter(Order.id == order_id, Order.order_status == expected)
            .update(values, synchronize_session=False)
        )
        return updated == 1

    @staticmethod
    def add_item(db: Session, order_id: int, service_id: int, quantity: float, price_per_unit: float) -> OrderItem:
        item = OrderItem(
            order_id=order_id,
            service_id=service_id,
            quantity=quantity,
            price_per_unit=price_per_unit,
            subtotal=round(quantity * price_per_unit, 2),
        )
        db.add(item)
        db.flush()
        return item

    @staticmethod
    def archive_order(db: Session, order: Order, expected: str, completed_by: Optional[int]) -> Optional[OrderHistory]:
        """
        Copy the order into order_history and remove it (items cascade) from the working tables.

        The delete is conditional on ``expected`` so that two concurrent completions cannot
        both archive the same order. Returns None when the guard fails. The caller commits.
        """
        snapshot = OrderHistory(
            order_id=order.id,
            shop_id=order.shop_id,
            branch_id=order.branch_id,
            customer_id=order.customer_id,
            customer_name=order.customer_name,
            customer_contact=order.customer_contact,
            method_code=order.method.code,
            method_label=order.method.label,
            service_name=order.service.name,
            weight_kg=order.weight_kg,
            amount=order.amount,
            ordered_at=order.created_at,
            completed_at=utcnow(),
            completed_by=completed_by,
        )

        deleted = (
            db.query(Order)
            .filter(Order.id == order.id, Order.order_status == expected)
            .delete(synchronize_session=False)
        )
        if deleted != 1:
            return None

        db.expunge(order)
        db.add(snapshot)
        db.flush()
        return snapshot
