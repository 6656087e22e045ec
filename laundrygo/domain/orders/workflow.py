"""
Order status progression.

    pending --accept--> in_progress --> completed                 (dropoff, self_service)
                                    \\-> delivering --> completed  (delivery, pickup)

Forward only; there is no cancellation. A completed order leaves the working
tables and lives on in order_history.
"""

PENDING = "pending"
IN_PROGRESS = "in_progress"
DELIVERING = "delivering"
COMPLETED = "completed"

WORKING_STATUSES = (PENDING, IN_PROGRESS, DELIVERING)
WORK_QUEUE_STATUSES = (IN_PROGRESS, DELIVERING)

# Methods whose finished laundry leaves the shop through a rider
DELIVERED_METHODS = frozenset({"delivery", "pickup"})


class InvalidTransition(ValueError):
    pass


def next_status(current: str, method_code: str) -> str:
    """Status that follows ``current`` for an order placed with ``method_code``"""
    if current == PENDING:
        return IN_PROGRESS
    if current == IN_PROGRESS:
        return DELIVERING if method_code in DELIVERED_METHODS else COMPLETED
    if current == DELIVERING:
        return COMPLETED
    raise InvalidTransition(f"Order in status '{current}' cannot move forward")


def compute_amount(weight_kg: float, price_per_kg: float, *addon_prices) -> float:
    """Kilo charge plus flat add-on prices, rounded to cents"""
    total = weight_kg * price_per_kg + sum(p for p in addon_prices if p)
    return round(total, 2)
