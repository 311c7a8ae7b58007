"""Menu catalog API router."""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from hotel_billing.db.dependencies import get_catalog, get_current_operator, get_storage
from hotel_billing.engine.catalog import MenuCatalog, normalize_code
from hotel_billing.engine.totals import MAX_MONEY
from hotel_billing.storage import DuplicateMenuCode, Storage

logger = logging.getLogger(__name__)


class MenuItemResponse(BaseModel):
    """Menu item response model."""
    id: int
    alphaCode: str
    numericCode: str
    description: str
    generalRate: float
    acRate: float


class CreateMenuItemRequest(BaseModel):
    """Request body for creating a menu item. Fields are checked by the endpoint."""
    alphaCode: Optional[str] = None
    numericCode: Optional[str] = None
    description: Optional[str] = None
    generalRate: Optional[float] = Field(None, le=float(MAX_MONEY))
    acRate: Optional[float] = Field(None, le=float(MAX_MONEY))


router = APIRouter(prefix="/api/menu", tags=["menu"])


@router.get("", response_model=List[MenuItemResponse], summary="List all menu items")
async def list_menu_items(storage: Storage = Depends(get_storage)):
    """Return every menu item ordered by id."""
    return [MenuItemResponse(**record.to_dict()) for record in storage.list_menu_items()]


@router.post("", status_code=201, response_model=MenuItemResponse, summary="Add a menu item")
async def create_menu_item(
    request: CreateMenuItemRequest,
    storage: Storage = Depends(get_storage),
    catalog: MenuCatalog = Depends(get_catalog),
    operator: Dict[str, Any] = Depends(get_current_operator),
):
    """
    Create a menu item and return it as stored.

    - **alphaCode**: alphabetic code, stored uppercase (e.g. IDL)
    - **numericCode**: numeric code (e.g. 101)
    - **generalRate** / **acRate**: prices for the two seating areas (>= 0)
    """
    alpha_code = normalize_code(request.alphaCode)
    numeric_code = (request.numericCode or "").strip()
    description = (request.description or "").strip()

    if not alpha_code or not numeric_code or not description \
            or request.generalRate is None or request.acRate is None:
        raise HTTPException(status_code=400, detail="All fields are required")
    if not alpha_code.isalpha():
        raise HTTPException(status_code=400, detail="alphaCode must contain letters only")
    if not numeric_code.isdigit():
        raise HTTPException(status_code=400, detail="numericCode must contain digits only")
    if request.generalRate < 0 or request.acRate < 0:
        raise HTTPException(status_code=400, detail="Rates must not be negative")

    try:
        record = storage.add_menu_item(
            alpha_code=alpha_code,
            numeric_code=numeric_code,
            description=description,
            general_rate=Decimal(str(request.generalRate)),
            ac_rate=Decimal(str(request.acRate)),
        )
    except DuplicateMenuCode as e:
        raise HTTPException(status_code=409, detail=str(e))

    # Keep the shared lookup cache in step without re-reading the whole menu
    catalog.add(record)
    logger.info(f"Operator {operator['id']} added menu item {record.alpha_code}/{record.numeric_code} (id={record.id})")
    return MenuItemResponse(**record.to_dict())
