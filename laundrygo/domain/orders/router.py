"""Order routers - employee work queue, delivery runs and customer ordering"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_role
from ...database import get_db
from ...models import User
from .schemas import (
    AcceptOrder,
    BranchOrdersResponse,
    CustomerOrderCreate,
    OrderIntake,
    OrderResponse,
    StatusUpdate,
    TransitionResponse,
)
from .service import OrderService

employee_router = APIRouter(prefix="/employee", tags=["Employee"])
delivery_router = APIRouter(prefix="/delivery", tags=["Delivery"])
customer_router = APIRouter(prefix="/customer", tags=["Customer"])

require_employee = require_role("employee")
require_delivery = require_role("delivery")
require_customer = require_role("customer")


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    """Dependency injection for OrderService"""
    return OrderService(db)


# ============================================================================
# EMPLOYEE
# ============================================================================


@employee_router.get("/shop-data")
async def employee_shop_data(
    branch_id: int = Query(...),
    user: User = Depends(require_employee),
    service: OrderService = Depends(get_order_service),
):
    """Catalog used by the counter intake form (pickup is customer-only)"""
    return service.employee_shop_data(user, branch_id)


@employee_router.get("/orders", response_model=BranchOrdersResponse)
async def employee_orders(
    branch_id: int = Query(...),
    user: User = Depends(require_employee),
    service: OrderService = Depends(get_order_service),
):
    return service.employee_orders(user, branch_id)


@employee_router.post("/orders", response_model=OrderResponse, status_code=201)
async def create_walk_in_order(
    data: OrderIntake,
    user: User = Depends(require_employee),
    service: OrderService = Depends(get_order_service),
):
    return service.intake(user, data)


@employee_router.post("/orders/{order_id}/accept", response_model=TransitionResponse)
async def accept_order(
    order_id: int,
    data: AcceptOrder,
    user: User = Depends(require_employee),
    service: OrderService = Depends(get_order_service),
):
    """Weigh a pending order, price it and move it into the work queue"""
    return service.accept(user, order_id, data.weight_kg)


@employee_router.post("/orders/{order_id}/advance", response_model=TransitionResponse)
async def advance_order(
    order_id: int,
    user: User = Depends(require_employee),
    service: OrderService = Depends(get_order_service),
):
    return service.advance(user, order_id)


@employee_router.put("/orders/{order_id}", response_model=TransitionResponse)
async def update_order_status(
    order_id: int,
    data: StatusUpdate,
    user: User = Depends(require_employee),
    service: OrderService = Depends(get_order_service),
):
    return service.set_status(user, order_id, data.order_status)


# ============================================================================
# DELIVERY
# ============================================================================


@delivery_router.get("/orders")
async def delivery_orders(
    user: User = Depends(require_delivery),
    service: OrderService = Depends(get_order_service),
):
    return service.delivery_orders(user)


@delivery_router.post("/orders/{order_id}/complete", response_model=TransitionResponse)
async def complete_delivery(
    order_id: int,
    user: User = Depends(require_delivery),
    service: OrderService = Depends(get_order_service),
):
    return service.delivery_complete(user, order_id)


# ============================================================================
# CUSTOMER
# ============================================================================


@customer_router.get("/branches/{branch_id}/catalog")
async def branch_catalog(
    branch_id: int,
    user: User = Depends(require_customer),
    service: OrderService = Depends(get_order_service),
):
    return service.customer_catalog(branch_id)


@customer_router.post("/orders", response_model=OrderResponse, status_code=201)
async def place_order(
    data: CustomerOrderCreate,
    user: User = Depends(require_customer),
    service: OrderService = Depends(get_order_service),
):
    return service.customer_place_order(user, data)


@customer_router.get("/orders")
async def my_orders(
    user: User = Depends(require_customer),
    service: OrderService = Depends(get_order_service),
):
    return service.customer_orders(user)
