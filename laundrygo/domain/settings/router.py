"""Settings router - owner shop profile, opening hours and branch contacts"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import OwnerContext, require_owner
from ...database import get_db
from ..shops.schemas import ShopResponse, ShopUpdate
from .schemas import ContactsUpdate, OperatingHoursUpdate
from .service import SettingsService

router = APIRouter(prefix="/owner/settings", tags=["Owner"])


def get_settings_service(db: Session = Depends(get_db)) -> SettingsService:
    """Dependency injection for SettingsService"""
    return SettingsService(db)


@router.get("")
async def get_settings(
    branch_id: Optional[int] = Query(None),
    owner: OwnerContext = Depends(require_owner),
    service: SettingsService = Depends(get_settings_service),
):
    """Shop profile plus the contacts and weekly hours of one branch"""
    return service.get_settings(owner, branch_id)


@router.put("/shop", response_model=ShopResponse)
async def update_shop(
    data: ShopUpdate,
    owner: OwnerContext = Depends(require_owner),
    service: SettingsService = Depends(get_settings_service),
):
    return service.update_shop(owner, data)


@router.put("/hours")
async def update_hours(
    data: OperatingHoursUpdate,
    owner: OwnerContext = Depends(require_owner),
    service: SettingsService = Depends(get_settings_service),
):
    return service.update_hours(owner, data)


@router.put("/contacts")
async def update_contacts(
    data: ContactsUpdate,
    owner: OwnerContext = Depends(require_owner),
    service: SettingsService = Depends(get_settings_service),
):
    """Replace every contact of the branch with the submitted list"""
    return service.update_contacts(owner, data)
