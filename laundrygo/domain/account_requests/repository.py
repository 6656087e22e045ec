"""Account request repository"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import AccountRequest


class AccountRequestRepository:
    """Repository for account request database operations"""

    @staticmethod
    def list_requests(db: Session, status: Optional[str] = None) -> list[AccountRequest]:
        query = db.query(AccountRequest)
        if status:
            query = query.filter(AccountRequest.status == status)
        return query.order_by(AccountRequest.submitted_at.desc(), AccountRequest.id.desc()).all()

    @staticmethod
    def get_request(db: Session, request_id: int) -> Optional[AccountRequest]:
        return db.query(AccountRequest).filter(AccountRequest.id == request_id).first()

    @staticmethod
    def pending_with_email(db: Session, email: str) -> bool:
        return (
            db.query(AccountRequest.id)
            .filter(AccountRequest.status == "pending", func.lower(AccountRequest.email) == email.lower())
            .first()
            is not None
        )

    @staticmethod
    def pending_with_shop_name(db: Session, shop_name: str) -> bool:
        return (
            db.query(AccountRequest.id)
            .filter(
                AccountRequest.status == "pending",
                func.lower(AccountRequest.shop_name) == shop_name.lower(),
            )
            .first()
            is not None
        )

    @staticmethod
    def create_request(db: Session, **request_data) -> AccountRequest:
        account_request = AccountRequest(status="pending", **request_data)
        db.add(account_request)
        db.commit()
        db.refresh(account_request)
        return account_request

    @staticmethod
    def delete_request(db: Session, account_request: AccountRequest) -> None:
        db.delete(account_request)
        db.commit()
