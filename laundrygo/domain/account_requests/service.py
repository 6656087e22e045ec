"""Account request service - public applications and the admin approval flow"""

import logging
from typing import Optional

from fastapi import HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...activity_logger import log_admin_action
from ...models import AccountRequest, User
from ...security_utils import generate_secure_password, hash_password_bcrypt
from ..branches.repository import BranchRepository
from ..catalog.repository import CatalogRepository
from ..shops.repository import ShopRepository
from ..users.repository import UserRepository
from .repository import AccountRequestRepository
from .schemas import AccountRequestCreate

logger = logging.getLogger(__name__)

MAIN_BRANCH_NAME = "Main Branch"
REVIEW_ACTIONS = ("approve", "reject")


class AccountRequestService:
    """Service layer for account requests"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AccountRequestRepository()
        self.users = UserRepository()
        self.shops = ShopRepository()
        self.branches = BranchRepository()
        self.catalog = CatalogRepository()

    # ========================================================================
    # PUBLIC SUBMISSION
    # ========================================================================

    def submit_request(self, data: AccountRequestCreate) -> dict:
        logger.info(f"📥 Account request for shop '{data.shopName}' from {data.email}")

        if self.users.email_exists(self.db, data.email):
            raise HTTPException(status_code=409, detail="An account with this email already exists")
        if self.shops.name_taken(self.db, data.shopName):
            raise HTTPException(status_code=409, detail="A shop with this name already exists")
        if self.repo.pending_with_email(self.db, data.email):
            raise HTTPException(
                status_code=409, detail="A pending request with this email already exists"
            )
        if self.repo.pending_with_shop_name(self.db, data.shopName):
            raise HTTPException(
                status_code=409, detail="A pending request for this shop name already exists"
            )

        account_request = self.repo.create_request(
            self.db,
            name=data.name,
            email=data.email,
            contact=data.contact,
            shop_name=data.shopName,
            shop_address=data.shopAddress,
            latitude=data.latitude,
            longitude=data.longitude,
        )
        logger.info(f"✅ Account request {account_request.id} submitted")
        return {"message": "Account request submitted successfully", "id": account_request.id}

    # ========================================================================
    # ADMIN REVIEW
    # ========================================================================

    def list_requests(self, status: Optional[str]) -> list[AccountRequest]:
        return self.repo.list_requests(self.db, None if status in (None, "", "all") else status)

    def get_request(self, request_id: int) -> AccountRequest:
        account_request = self.repo.get_request(self.db, request_id)
        if not account_request:
            raise HTTPException(status_code=404, detail="Account request not found")
        return account_request

    def review_request(self, request_id: int, action: str, admin: User, request: Request) -> dict:
        if action not in REVIEW_ACTIONS:
            raise HTTPException(status_code=400, detail="Invalid action. Use 'approve' or 'reject'")

        account_request = self.get_request(request_id)
        if account_request.status != "pending":
            raise HTTPException(status_code=400, detail="Request has already been processed")

        if action == "approve":
            return self._approve(account_request, admin, request)
        return self._reject(account_request, admin, request)

    def _approve(self, account_request: AccountRequest, admin: User, request: Request) -> dict:
        """Provision owner, shop, main branch, assignment and default services in one transaction"""
        if self.users.email_exists(self.db, account_request.email):
            raise HTTPException(status_code=400, detail="Email already registered")
        if self.shops.name_taken(self.db, account_request.shop_name):
            raise HTTPException(status_code=400, detail="A shop with this name already exists")

        request_id = account_request.id
        password = generate_secure_password()

        try:
            owner = self.users.add_user(
                self.db,
                email=account_request.email,
                password_hash=hash_password_bcrypt(password),
                full_name=account_request.name,
                phone=account_request.contact,
            )
            self.users.grant_role(self.db, owner, "owner")

            shop = self.shops.add_shop(
                self.db,
                name=account_request.shop_name,
                description=f"Laundry shop at {account_request.shop_address}",
                owner_id=owner.id,
            )
            branch = self.branches.add_branch(
                self.db,
                shop.id,
                name=MAIN_BRANCH_NAME,
                address=account_request.shop_address,
                latitude=account_request.latitude,
                longitude=account_request.longitude,
            )
            self.users.add_assignment(self.db, owner, shop.id, "owner")
            self.catalog.add_default_services(self.db, branch.id)

            self.db.delete(account_request)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to approve account request {request_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to approve account request") from e

        result = {
            "message": "Account request approved",
            "owner": {"id": owner.id, "email": owner.email, "full_name": owner.full_name},
            "shop": {"id": shop.id, "name": shop.name},
            "branch": {"id": branch.id, "name": branch.name},
            "temporaryPassword": password,
        }
        logger.info(f"✅ Approved account request {request_id}: shop {shop.name} for {owner.email}")
        log_admin_action(
            self.db, admin, "approve_account_request", "account_request", request_id, shop.name,
            f"Approved shop {shop.name} for {owner.email}", request,
        )
        return result

    def _reject(self, account_request: AccountRequest, admin: User, request: Request) -> dict:
        request_id = account_request.id
        shop_name = account_request.shop_name
        email = account_request.email

        self.repo.delete_request(self.db, account_request)
        logger.info(f"✅ Rejected account request {request_id}")
        log_admin_action(
            self.db, admin, "reject_account_request", "account_request", request_id, shop_name,
            f"Rejected request from {email}", request,
        )
        return {"message": "Account request rejected"}

    def delete_request(self, request_id: int, admin: User, request: Request) -> dict:
        account_request = self.get_request(request_id)
        if account_request.status != "pending":
            raise HTTPException(status_code=400, detail="Request has already been processed")

        shop_name = account_request.shop_name
        self.repo.delete_request(self.db, account_request)
        log_admin_action(
            self.db, admin, "delete_account_request", "account_request", request_id, shop_name, None, request
        )
        return {"message": "Account request deleted"}
