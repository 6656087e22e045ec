from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the database stores"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ============================================================================
# USERS & ROLES
# ============================================================================


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), unique=True, nullable=False)  # superadmin, admin, owner, employee, delivery, customer


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(100), unique=True, index=True, nullable=False)
    full_name = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow)

    roles = relationship(
        "UserRole", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    assignments = relationship(
        "ShopUserAssignment",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    owned_shops = relationship("Shop", back_populates="owner", passive_deletes=True)

    @property
    def role_names(self) -> list[str]:
        return [user_role.role.name for user_role in self.roles]


class UserRole(Base):
    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role_id", name="uq_user_role"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False)

    user = relationship("User", back_populates="roles")
    role = relationship("Role", lazy="joined")


# ============================================================================
# SHOPS & BRANCHES
# ============================================================================


class Shop(Base):
    __tablename__ = "shops"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(String(500), nullable=True)
    logo_url = Column(String(500), nullable=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow)

    owner = relationship("User", back_populates="owned_shops")
    branches = relationship(
        "Branch",
        back_populates="shop",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Branch.id",
    )
    assignments = relationship(
        "ShopUserAssignment",
        back_populates="shop",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    order_history = relationship(
        "OrderHistory", cascade="all, delete-orphan", passive_deletes=True
    )


class Branch(Base):
    __tablename__ = "shop_branches"
    __table_args__ = (UniqueConstraint("shop_id", "name", name="uq_branch_shop_name"),)

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    address = Column(String(200), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())

    shop = relationship("Shop", back_populates="branches")
    methods = relationship(
        "BranchMethod", back_populates="branch", cascade="all, delete-orphan", passive_deletes=True
    )
    services = relationship(
        "ShopService", back_populates="branch", cascade="all, delete-orphan", passive_deletes=True
    )
    detergents = relationship(
        "BranchDetergent", back_populates="branch", cascade="all, delete-orphan", passive_deletes=True
    )
    softeners = relationship(
        "BranchSoftener", back_populates="branch", cascade="all, delete-orphan", passive_deletes=True
    )
    hours = relationship(
        "BranchOperatingHours",
        back_populates="branch",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="BranchOperatingHours.day_of_week",
    )
    contacts = relationship(
        "BranchContact", back_populates="branch", cascade="all, delete-orphan", passive_deletes=True
    )
    orders = relationship(
        "Order", back_populates="branch", cascade="all, delete-orphan", passive_deletes=True
    )
    assignments = relationship(
        "ShopUserAssignment",
        back_populates="branch",
        cascade="all",
        passive_deletes=True,
    )


class ShopUserAssignment(Base):
    """Links a user to a shop (and optionally a branch) with an in-shop role"""

    __tablename__ = "shop_user_assignments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False, index=True)
    branch_id = Column(Integer, ForeignKey("shop_branches.id", ondelete="CASCADE"), nullable=True)
    role_in_shop = Column(String(20), nullable=False)  # owner, employee, delivery
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())

    user = relationship("User", back_populates="assignments")
    shop = relationship("Shop", back_populates="assignments")
    branch = relationship("Branch", back_populates="assignments")


# ============================================================================
# CATALOG: METHODS, SERVICES, DETERGENTS, SOFTENERS
# ============================================================================


class ShopMethod(Base):
    __tablename__ = "shop_methods"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(20), unique=True, nullable=False)  # dropoff, delivery, pickup, self_service
    label = Column(String(50), nullable=False)


class BranchMethod(Base):
    __tablename__ = "branch_methods"
    __table_args__ = (UniqueConstraint("branch_id", "method_id", name="uq_branch_method"),)

    id = Column(Integer, primary_key=True, index=True)
    branch_id = Column(
        Integer, ForeignKey("shop_branches.id", ondelete="CASCADE"), nullable=False, index=True
    )
    method_id = Column(Integer, ForeignKey("shop_methods.id", ondelete="CASCADE"), nullable=False)
    is_enabled = Column(Boolean, default=True, nullable=False)

    branch = relationship("Branch", back_populates="methods")
    method = relationship("ShopMethod", lazy="joined")


class ShopService(Base):
    __tablename__ = "shop_services"

    id = Column(Integer, primary_key=True, index=True)
    branch_id = Column(
        Integer, ForeignKey("shop_branches.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    price_per_kg = Column(Float, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())

    branch = relationship("Branch", back_populates="services")


class DetergentType(Base):
    __tablename__ = "detergent_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(String(500), nullable=True)
    base_price = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())


class SoftenerType(Base):
    __tablename__ = "softener_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(String(500), nullable=True)
    base_price = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())


class BranchDetergent(Base):
    __tablename__ = "branch_detergents"
    __table_args__ = (UniqueConstraint("branch_id", "detergent_id", name="uq_branch_detergent"),)

    id = Column(Integer, primary_key=True, index=True)
    branch_id = Column(
        Integer, ForeignKey("shop_branches.id", ondelete="CASCADE"), nullable=False, index=True
    )
    detergent_id = Column(
        Integer, ForeignKey("detergent_types.id", ondelete="CASCADE"), nullable=False
    )
    custom_price = Column(Float, nullable=True)  # None means base_price applies
    is_available = Column(Boolean, default=True, nullable=False)
    display_order = Column(Integer, default=0, nullable=False)

    branch = relationship("Branch", back_populates="detergents")
    item = relationship("DetergentType", lazy="joined")


class BranchSoftener(Base):
    __tablename__ = "branch_softeners"
    __table_args__ = (UniqueConstraint("branch_id", "softener_id", name="uq_branch_softener"),)

    id = Column(Integer, primary_key=True, index=True)
    branch_id = Column(
        Integer, ForeignKey("shop_branches.id", ondelete="CASCADE"), nullable=False, index=True
    )
    softener_id = Column(Integer, ForeignKey("softener_types.id", ondelete="CASCADE"), nullable=False)
    custom_price = Column(Float, nullable=True)
    is_available = Column(Boolean, default=True, nullable=False)
    display_order = Column(Integer, default=0, nullable=False)

    branch = relationship("Branch", back_populates="softeners")
    item = relationship("SoftenerType", lazy="joined")


# ============================================================================
# BRANCH SETTINGS
# ============================================================================


class BranchOperatingHours(Base):
    __tablename__ = "branch_operating_hours"
    __table_args__ = (UniqueConstraint("branch_id", "day_of_week", name="uq_branch_day"),)

    id = Column(Integer, primary_key=True, index=True)
    branch_id = Column(
        Integer, ForeignKey("shop_branches.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday
    open_time = Column(String(5), nullable=False, default="09:00")
    close_time = Column(String(5), nullable=False, default="17:00")
    is_closed = Column(Boolean, default=False, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    branch = relationship("Branch", back_populates="hours")


class BranchContact(Base):
    __tablename__ = "branch_contacts"

    id = Column(Integer, primary_key=True, index=True)
    branch_id = Column(
        Integer, ForeignKey("shop_branches.id", ondelete="CASCADE"), nullable=False, index=True
    )
    contact_type = Column(String(20), nullable=False)  # phone, email, facebook, messenger, other
    value = Column(String(200), nullable=False)
    is_primary = Column(Boolean, default=False, nullable=False)

    branch = relationship("Branch", back_populates="contacts")


# ============================================================================
# ORDERS
# ============================================================================


class Order(Base):
    """Working order row: pending intake or an item in the branch work queue"""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False, index=True)
    branch_id = Column(
        Integer, ForeignKey("shop_branches.id", ondelete="CASCADE"), nullable=False, index=True
    )
    customer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    customer_name = Column(String(100), nullable=False)
    customer_contact = Column(String(20), nullable=True)
    method_id = Column(Integer, ForeignKey("shop_methods.id"), nullable=False)
    service_id = Column(Integer, ForeignKey("shop_services.id", ondelete="CASCADE"), nullable=False)
    detergent_id = Column(Integer, ForeignKey("detergent_types.id", ondelete="SET NULL"), nullable=True)
    softener_id = Column(Integer, ForeignKey("softener_types.id", ondelete="SET NULL"), nullable=True)
    detergent_price = Column(Float, nullable=True)  # final price captured at intake
    softener_price = Column(Float, nullable=True)
    weight_kg = Column(Float, nullable=True)
    amount = Column(Float, nullable=True)
    order_status = Column(String(20), nullable=False, default="pending", index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now(), index=True)
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow)

    branch = relationship("Branch", back_populates="orders")
    customer = relationship("User")
    method = relationship("ShopMethod", lazy="joined")
    service = relationship("ShopService", lazy="joined")
    detergent = relationship("DetergentType")
    softener = relationship("SoftenerType")
    items = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", passive_deletes=True
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("shop_services.id", ondelete="CASCADE"), nullable=False)
    quantity = Column(Float, nullable=False)  # kilos
    price_per_unit = Column(Float, nullable=False)
    subtotal = Column(Float, nullable=False)

    order = relationship("Order", back_populates="items")
    service = relationship("ShopService")


class OrderHistory(Base):
    """Archive of completed orders; rows are copied here and removed from orders"""

    __tablename__ = "order_history"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, nullable=False, index=True)  # id the order had while working
    shop_id = Column(Integer, ForeignKey("shops.id", ondelete="CASCADE"), nullable=False, index=True)
    branch_id = Column(
        Integer, ForeignKey("shop_branches.id", ondelete="SET NULL"), nullable=True, index=True
    )
    customer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    customer_name = Column(String(100), nullable=False)
    customer_contact = Column(String(20), nullable=True)
    method_code = Column(String(20), nullable=False)
    method_label = Column(String(50), nullable=False)
    service_name = Column(String(100), nullable=False)
    weight_kg = Column(Float, nullable=True)
    amount = Column(Float, nullable=True)
    ordered_at = Column(DateTime, nullable=False)
    completed_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    completed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)


# ============================================================================
# ACCOUNT REQUESTS & AUDIT
# ============================================================================


class AccountRequest(Base):
    __tablename__ = "account_requests"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), nullable=False, index=True)
    contact = Column(String(20), nullable=False)
    shop_name = Column(String(100), nullable=False)
    shop_address = Column(String(200), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    status = Column(String(20), default="pending", nullable=False, index=True)
    submitted_at = Column(DateTime, default=utcnow, server_default=func.now())


class ActivityLog(Base):
    """Plain-text activity trail; no foreign keys so entries outlive what they describe"""

    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    shop_id = Column(Integer, nullable=True, index=True)
    branch_id = Column(Integer, nullable=True, index=True)
    actor_id = Column(Integer, nullable=True)
    actor_name = Column(String(100), nullable=False)
    actor_type = Column(String(20), nullable=False)  # superadmin, owner, employee, delivery, customer, system
    action = Column(String(50), nullable=False)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(50), nullable=True)
    entity_name = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    severity = Column(String(10), default="info", nullable=False)  # info, warning, error, critical
    created_at = Column(DateTime, default=utcnow, index=True)


class AdminAuditLog(Base):
    __tablename__ = "admin_audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    admin_id = Column(Integer, nullable=True)
    action = Column(String(50), nullable=False)
    target_type = Column(String(50), nullable=False)
    target_id = Column(String(50), nullable=True)
    target_name = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=utcnow)
