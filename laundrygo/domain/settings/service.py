"""Settings service - the owner's shop profile, opening hours and contacts"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...activity_logger import log_activity
from ...auth import OwnerContext
from ..branches.service import BranchService, serialize_branch
from ..shops.schemas import ShopUpdate
from ..shops.service import ShopService
from .repository import SettingsRepository
from .schemas import ContactsUpdate, OperatingHoursUpdate

logger = logging.getLogger(__name__)


class SettingsService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = SettingsRepository()
        self.branches = BranchService(db)
        self.shops = ShopService(db)

    def get_settings(self, owner: OwnerContext, branch_id: Optional[int]) -> dict:
        branch = self.branches.resolve_owner_branch(owner, branch_id)
        shop = owner.shop
        return {
            "shop": {
                "id": shop.id,
                "name": shop.name,
                "description": shop.description,
                "logo_url": shop.logo_url,
            },
            "branch": serialize_branch(branch),
            "contacts": [
                {"id": c.id, "contact_type": c.contact_type, "value": c.value, "is_primary": c.is_primary}
                for c in self.repo.list_contacts(self.db, branch.id)
            ],
            "hours": [
                {
                    "day_of_week": h.day_of_week,
                    "open_time": h.open_time,
                    "close_time": h.close_time,
                    "is_closed": h.is_closed,
                }
                for h in self.repo.list_hours(self.db, branch.id)
            ],
        }

    def update_shop(self, owner: OwnerContext, data: ShopUpdate) -> dict:
        return self.shops.update_owner_shop(owner, data)

    def update_hours(self, owner: OwnerContext, data: OperatingHoursUpdate) -> dict:
        branch = self.branches.get_owner_branch(owner, data.branch_id)

        days = [entry.day_of_week for entry in data.hours]
        if len(days) != len(set(days)):
            raise HTTPException(status_code=400, detail="Each day may only appear once")
        for entry in data.hours:
            # HH:MM strings compare correctly as text
            if not entry.is_closed and entry.close_time <= entry.open_time:
                raise HTTPException(
                    status_code=400, detail=f"Closing time must be after opening time (day {entry.day_of_week})"
                )

        try:
            self.repo.upsert_hours(self.db, branch.id, [entry.model_dump() for entry in data.hours])
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to save hours for branch {branch.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update operating hours") from e

        log_activity(
            self.db,
            action="update_hours",
            entity_type="branch",
            actor=owner.user,
            actor_type="owner",
            entity_id=branch.id,
            entity_name=branch.name,
            description="Updated operating hours",
            shop_id=owner.shop.id,
            branch_id=branch.id,
        )
        return {"message": "Operating hours updated successfully"}

    def update_contacts(self, owner: OwnerContext, data: ContactsUpdate) -> dict:
        branch = self.branches.get_owner_branch(owner, data.branch_id)
        if sum(1 for c in data.contacts if c.is_primary) > 1:
            raise HTTPException(status_code=400, detail="Only one contact can be primary")

        try:
            self.repo.replace_contacts(self.db, branch.id, [c.model_dump() for c in data.contacts])
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to save contacts for branch {branch.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update contacts") from e

        log_activity(
            self.db,
            action="update_contacts",
            entity_type="branch",
            actor=owner.user,
            actor_type="owner",
            entity_id=branch.id,
            entity_name=branch.name,
            description=f"Updated contacts ({len(data.contacts)})",
            shop_id=owner.shop.id,
            branch_id=branch.id,
        )
        return {"message": "Contacts updated successfully"}
