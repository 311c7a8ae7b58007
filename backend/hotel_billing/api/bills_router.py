"""
Bill finalization and history API router.

POST /api/bills accepts a client-held order (the billing terminal keeps the
order in the browser until "End & Print Bill") and commits it atomically.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from hotel_billing.db.dependencies import get_catalog, get_storage, require_admin
from hotel_billing.engine.catalog import MenuCatalog
from hotel_billing.engine.commit import BillCommitService
from hotel_billing.engine.errors import ItemNotFound
from hotel_billing.engine.order import Order, OrderAggregator
from hotel_billing.engine.pricing import Area
from hotel_billing.engine.sequencer import BillSequencer
from hotel_billing.engine.totals import CENT, MAX_MONEY, MAX_QUANTITY, money, round_money
from hotel_billing.storage import Storage
from hotel_billing.utils.time_utils import business_date

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bills", tags=["bills"])


# ---------- Request/Response Models ----------

class BillDetails(BaseModel):
    tableNo: Optional[Union[str, int]] = ""
    partyNo: Optional[Union[str, int]] = "1"
    waiterNo: Optional[Union[str, int]] = ""
    area: Optional[str] = "GENERAL"


class BillItemIn(BaseModel):
    id: int
    quantity: int = Field(..., le=MAX_QUANTITY)
    price: float = Field(..., ge=0, le=float(MAX_MONEY))


class FinalizeBillRequest(BaseModel):
    billDetails: Optional[BillDetails] = None
    billItems: Optional[List[BillItemIn]] = None
    total: Optional[float] = Field(None, le=float(MAX_MONEY))


class FinalizeBillResponse(BaseModel):
    success: bool
    billId: int
    billNo: int
    total: float


def _text(value) -> str:
    return "" if value is None else str(value).strip().upper()


# ---------- Endpoints ----------

@router.post("", status_code=201, response_model=FinalizeBillResponse, summary="Finalize and save a bill")
async def finalize_bill(
    payload: FinalizeBillRequest,
    storage: Storage = Depends(get_storage),
    catalog: MenuCatalog = Depends(get_catalog),
):
    """
    Save a bill header and its items in one transaction.

    Rejected before any transaction is opened when billItems is empty or
    total is missing/zero. The stored total is recomputed from the items.
    """
    if not payload.billDetails or not payload.billItems or not payload.total:
        raise HTTPException(status_code=400, detail="Invalid bill data")

    details = payload.billDetails
    try:
        area = Area.parse(details.area)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    order = Order(
        table_no=_text(details.tableNo),
        party_no=_text(details.partyNo) or "1",
        waiter_no=_text(details.waiterNo),
        area=area,
    )
    aggregator = OrderAggregator(catalog)
    for item in payload.billItems:
        record = catalog.get(item.id) or storage.get_menu_item(item.id)
        if record is None:
            raise ItemNotFound(item.id)
        # The client's price is the snapshot taken when the item was first added
        aggregator.add_priced(order, record, Decimal(str(item.price)), item.quantity)

    client_total = Decimal(str(payload.total))
    if abs(round_money(order.total) - client_total) > CENT:
        logger.warning(
            f"Client total {client_total} differs from computed total {round_money(order.total)} "
            f"for table {order.table_no}; storing computed total"
        )

    record = BillCommitService(storage).finalize(order)
    return FinalizeBillResponse(
        success=True,
        billId=record.bill_id,
        billNo=record.bill_no,
        total=money(record.total_amount),
    )


@router.get("/next-number", summary="Bill number shown for the next bill today")
async def get_next_bill_number(storage: Storage = Depends(get_storage)) -> Dict[str, Any]:
    today = business_date()
    return {
        "billNo": BillSequencer(storage).next_bill_number(today),
        "businessDate": today.isoformat(),
    }


@router.get("", summary="List bills for a business day")
async def list_bills(
    on: Optional[str] = Query(None, description="Business date (YYYY-MM-DD), default today"),
    table: Optional[str] = Query(None, description="Filter by table number"),
    limit: int = Query(50, ge=1, le=500, description="Max results per page"),
    offset: int = Query(0, ge=0, description="Offset for pagination"),
    storage: Storage = Depends(get_storage),
    admin: Dict[str, Any] = Depends(require_admin),
) -> Dict[str, Any]:
    """Daily bill report (admin only)."""
    if on:
        try:
            day = date.fromisoformat(on)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid date format")
    else:
        day = business_date()

    bills, total = storage.list_bills(
        business_date=day,
        table_no=table.strip().upper() if table else None,
        limit=limit,
        offset=offset,
    )
    return {
        "businessDate": day.isoformat(),
        "items": [bill.to_dict(include_items=False) for bill in bills],
        "total": total,
        "limit": limit,
        "offset": offset,
        "grandTotal": money(sum((b.total_amount for b in bills), Decimal("0"))),
    }


@router.get("/{bill_id}", summary="Get a bill with its items")
async def get_bill(
    bill_id: int,
    storage: Storage = Depends(get_storage),
    admin: Dict[str, Any] = Depends(require_admin),
) -> Dict[str, Any]:
    record = storage.get_bill(bill_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Bill {bill_id} not found")
    return record.to_dict()
