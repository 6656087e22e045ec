"""Order service - intake, the branch work queue and completion"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...activity_logger import log_activity
from ...auth import ensure_branch_assignment, get_staff_assignments
from ...models import Branch, Order, OrderHistory, User
from ..branches.repository import BranchRepository
from ..catalog.repository import CatalogRepository, final_price
from ..catalog.service import build_branch_catalog
from .repository import OrderRepository
from .schemas import CustomerOrderCreate, OrderIntake, OrderLines
from .workflow import (
    COMPLETED,
    DELIVERING,
    IN_PROGRESS,
    PENDING,
    WORK_QUEUE_STATUSES,
    InvalidTransition,
    compute_amount,
    next_status,
)

logger = logging.getLogger(__name__)

CONFLICT_DETAIL = "Order was modified by another request"


def _line(item, price: Optional[float]) -> Optional[dict]:
    if item is None:
        return None
    return {"id": item.id, "name": item.name, "price": price if price is not None else 0.0}


def serialize_order(order: Order) -> dict:
    return {
        "id": order.id,
        "shop_id": order.shop_id,
        "branch_id": order.branch_id,
        "customer_id": order.customer_id,
        "customer_name": order.customer_name,
        "customer_contact": order.customer_contact,
        "method": {"code": order.method.code, "label": order.method.label},
        "service": {"id": order.service.id, "name": order.service.name, "price": order.service.price_per_kg},
        "detergent": _line(order.detergent, order.detergent_price),
        "softener": _line(order.softener, order.softener_price),
        "weight_kg": order.weight_kg,
        "amount": order.amount,
        "order_status": order.order_status,
        "notes": order.notes,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }


def serialize_history(entry: OrderHistory) -> dict:
    return {
        "id": entry.id,
        "order_id": entry.order_id,
        "shop_id": entry.shop_id,
        "branch_id": entry.branch_id,
        "customer_name": entry.customer_name,
        "customer_contact": entry.customer_contact,
        "method_code": entry.method_code,
        "method_label": entry.method_label,
        "service_name": entry.service_name,
        "weight_kg": entry.weight_kg,
        "amount": entry.amount,
        "order_status": COMPLETED,
        "ordered_at": entry.ordered_at,
        "completed_at": entry.completed_at,
    }


class OrderService:
    """Service layer for order operations across employee, delivery and customer views"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepository()
        self.catalog = CatalogRepository()
        self.branches = BranchRepository()

    # ========================================================================
    # LOOKUPS
    # ========================================================================

    def _get_order(self, order_id: int) -> Order:
        order = self.repo.get_order(self.db, order_id)
        if not order:
            raise HTTPException(status_code=404, detail="Order not found")
        return order

    def _active_branch(self, branch_id: int) -> Branch:
        branch = self.branches.get_branch(self.db, branch_id)
        if not branch or not branch.is_active:
            raise HTTPException(status_code=404, detail="Branch not found")
        return branch

    def _employee_order(self, user: User, order_id: int) -> Order:
        order = self._get_order(order_id)
        ensure_branch_assignment(self.db, user, order.branch_id, "employee")
        return order

    # ========================================================================
    # INTAKE
    # ========================================================================

    def _resolve_addon(self, kind: str, branch_id: int, item_id: Optional[int]):
        """Return (item_id, final price) for an available add-on, or (None, None)"""
        if item_id is None:
            return None, None
        override = self.catalog.get_override(self.db, kind, branch_id, item_id)
        if not override or not override.is_available:
            raise HTTPException(status_code=400, detail=f"Selected {kind} is not available at this branch")
        return item_id, final_price(override)

    def _place_order(self, branch: Branch, data: OrderLines, **customer) -> Order:
        method = self.repo.get_enabled_method(self.db, branch.id, data.method)
        if not method:
            raise HTTPException(status_code=400, detail=f"Method '{data.method}' is not available at this branch")

        service = self.catalog.get_service(self.db, data.service_id)
        if not service or service.branch_id != branch.id or not service.is_active:
            raise HTTPException(status_code=400, detail="Service is not available at this branch")

        detergent_id, detergent_price = self._resolve_addon("detergent", branch.id, data.detergent_id)
        softener_id, softener_price = self._resolve_addon("softener", branch.id, data.softener_id)

        try:
            order = self.repo.create_order(
                self.db,
                shop_id=branch.shop_id,
                branch_id=branch.id,
                method_id=method.id,
                service_id=service.id,
                detergent_id=detergent_id,
                detergent_price=detergent_price,
                softener_id=softener_id,
                softener_price=softener_price,
                notes=data.notes,
                **customer,
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create order at branch {branch.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create order") from e

        logger.info(f"🧺 Order {order.id} placed at branch {branch.id} ({method.code}, {service.name})")
        return order

    def intake(self, user: User, data: OrderIntake) -> dict:
        ensure_branch_assignment(self.db, user, data.branch_id, "employee")
        branch = self._active_branch(data.branch_id)
        order = self._place_order(
            branch,
            data,
            customer_id=None,
            customer_name=data.customer_name,
            customer_contact=data.customer_contact,
        )
        log_activity(
            self.db,
            action="create_order",
            entity_type="order",
            actor=user,
            actor_type="employee",
            entity_id=order.id,
            entity_name=order.customer_name,
            description=f"Walk-in order for {order.customer_name}",
            shop_id=branch.shop_id,
            branch_id=branch.id,
        )
        return serialize_order(order)

    def customer_place_order(self, user: User, data: CustomerOrderCreate) -> dict:
        branch = self._active_branch(data.branch_id)
        order = self._place_order(
            branch,
            data,
            customer_id=user.id,
            customer_name=user.full_name or user.email,
            customer_contact=user.phone,
        )
        log_activity(
            self.db,
            action="create_order",
            entity_type="order",
            actor=user,
            actor_type="customer",
            entity_id=order.id,
            entity_name=order.customer_name,
            description=f"Online {order.method.label} order",
            shop_id=branch.shop_id,
            branch_id=branch.id,
        )
        return serialize_order(order)

    # ========================================================================
    # TRANSITIONS
    # ========================================================================

    def _log_transition(self, user: User, actor_type: str, order_id: int, shop_id, branch_id, previous, new):
        log_activity(
            self.db,
            action="order_status_changed",
            entity_type="order",
            actor=user,
            actor_type=actor_type,
            entity_id=order_id,
            description=f"Order #{order_id}: {previous} -> {new}",
            shop_id=shop_id,
            branch_id=branch_id,
        )

    def _conflict(self, order_id: int) -> HTTPException:
        self.db.rollback()
        logger.warning(f"⚠️ Order {order_id} changed underneath a transition")
        return HTTPException(status_code=409, detail=CONFLICT_DETAIL)

    def accept(self, user: User, order_id: int, weight_kg: float) -> dict:
        order = self._employee_order(user, order_id)
        if order.order_status != PENDING:
            raise HTTPException(status_code=400, detail="Only pending orders can be accepted")

        price_per_kg = order.service.price_per_kg
        amount = compute_amount(weight_kg, price_per_kg, order.detergent_price, order.softener_price)
        shop_id, branch_id, service_id = order.shop_id, order.branch_id, order.service_id

        try:
            if not self.repo.compare_and_set_status(
                self.db, order_id, PENDING, IN_PROGRESS, weight_kg=weight_kg, amount=amount
            ):
                raise self._conflict(order_id)
            self.repo.add_item(self.db, order_id, service_id, weight_kg, price_per_kg)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to accept order {order_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update order") from e

        logger.info(f"✅ Order {order_id} accepted: {weight_kg}kg, amount {amount}")
        self._log_transition(user, "employee", order_id, shop_id, branch_id, PENDING, IN_PROGRESS)

        order = self._get_order(order_id)
        return {
            "order_id": order_id,
            "previous_status": PENDING,
            "order_status": IN_PROGRESS,
            "order": serialize_order(order),
        }

    def _move(self, user: User, actor_type: str, order: Order, target: str) -> dict:
        """Apply one forward step (never the accept step) under the conditional guard"""
        order_id, previous = order.id, order.order_status
        shop_id, branch_id = order.shop_id, order.branch_id

        try:
            if target == COMPLETED:
                entry = self.repo.archive_order(self.db, order, previous, completed_by=user.id)
                if entry is None:
                    raise self._conflict(order_id)
                self.db.commit()
                self.db.refresh(entry)
            else:
                if not self.repo.compare_and_set_status(self.db, order_id, previous, target):
                    raise self._conflict(order_id)
                self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to move order {order_id} to {target}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update order") from e

        logger.info(f"🔄 Order {order_id}: {previous} -> {target}")
        self._log_transition(user, actor_type, order_id, shop_id, branch_id, previous, target)

        result = {"order_id": order_id, "previous_status": previous, "order_status": target}
        if target == COMPLETED:
            result["history"] = serialize_history(entry)
        else:
            result["order"] = serialize_order(self._get_order(order_id))
        return result

    def advance(self, user: User, order_id: int) -> dict:
        order = self._employee_order(user, order_id)
        if order.order_status == PENDING:
            raise HTTPException(status_code=400, detail="Pending orders must be accepted with a weight first")
        try:
            target = next_status(order.order_status, order.method.code)
        except InvalidTransition as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        return self._move(user, "employee", order, target)

    def set_status(self, user: User, order_id: int, target: str) -> dict:
        order = self._employee_order(user, order_id)
        try:
            expected = next_status(order.order_status, order.method.code)
        except InvalidTransition as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        if target != expected:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid status transition from '{order.order_status}' to '{target}'",
            )
        if order.order_status == PENDING:
            raise HTTPException(status_code=400, detail="Pending orders must be accepted with a weight first")
        return self._move(user, "employee", order, target)

    def delivery_complete(self, user: User, order_id: int) -> dict:
        order = self._get_order(order_id)
        ensure_branch_assignment(self.db, user, order.branch_id, "delivery")
        if order.order_status != DELIVERING:
            raise HTTPException(status_code=400, detail="Only orders out for delivery can be completed")
        return self._move(user, "delivery", order, COMPLETED)

    # ========================================================================
    # LISTINGS
    # ========================================================================

    def employee_shop_data(self, user: User, branch_id: int) -> dict:
        ensure_branch_assignment(self.db, user, branch_id, "employee")
        branch = self._active_branch(branch_id)
        return build_branch_catalog(self.db, branch, exclude_methods=("pickup",))

    def customer_catalog(self, branch_id: int) -> dict:
        branch = self._active_branch(branch_id)
        return build_branch_catalog(self.db, branch)

    def employee_orders(self, user: User, branch_id: int) -> dict:
        ensure_branch_assignment(self.db, user, branch_id, "employee")
        pending = self.repo.list_branch_orders(self.db, branch_id, statuses=(PENDING,))
        queue = self.repo.list_branch_orders(self.db, branch_id, statuses=WORK_QUEUE_STATUSES)
        history = self.repo.list_history(self.db, branch_id=branch_id)
        return {
            "pending": [serialize_order(o) for o in pending],
            "work_queue": [serialize_order(o) for o in queue],
            "history": [serialize_history(h) for h in history],
        }

    def delivery_orders(self, user: User) -> dict:
        assignments = get_staff_assignments(self.db, user, "delivery")
        if not assignments:
            raise HTTPException(status_code=403, detail="Delivery access required")
        branch_ids = [a.branch_id for a in assignments]
        orders = self.repo.list_orders_in_branches(self.db, branch_ids, DELIVERING)
        return {"orders": [serialize_order(o) for o in orders], "branch_ids": branch_ids}

    def customer_orders(self, user: User) -> dict:
        active = self.repo.list_customer_orders(self.db, user.id)
        history = self.repo.list_history(self.db, customer_id=user.id)
        return {
            "active": [serialize_order(o) for o in active],
            "history": [serialize_history(h) for h in history],
        }
