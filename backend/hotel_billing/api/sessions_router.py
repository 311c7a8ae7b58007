"""
Billing session API router.

A session holds one in-progress order on the server: the operator types item
codes, edits quantities and finally commits the bill. Nothing is persisted
until finalize succeeds.
"""

from typing import Any, Dict, Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from hotel_billing.db.dependencies import get_catalog, get_session_registry, get_storage
from hotel_billing.engine.catalog import MenuCatalog
from hotel_billing.engine.commit import BillCommitService
from hotel_billing.engine.order import OrderAggregator
from hotel_billing.engine.sequencer import BillSequencer
from hotel_billing.engine.session import BillingSession, SessionRegistry
from hotel_billing.engine.totals import MAX_QUANTITY
from hotel_billing.storage import Storage


router = APIRouter(prefix="/api/sessions", tags=["sessions"])


class SessionDetails(BaseModel):
    tableNo: Optional[Union[str, int]] = None
    partyNo: Optional[Union[str, int]] = None
    waiterNo: Optional[Union[str, int]] = None
    area: Optional[str] = None


class SubmitCodeRequest(BaseModel):
    code: str


class QuantityRequest(BaseModel):
    quantity: int = Field(..., le=MAX_QUANTITY)


def _get_billing_session(registry: SessionRegistry, session_id: str) -> BillingSession:
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return session


def _apply_details(session: BillingSession, details: SessionDetails) -> None:
    try:
        session.update_details(
            table_no=details.tableNo,
            party_no=details.partyNo,
            waiter_no=details.waiterNo,
            area=details.area,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("", status_code=201, summary="Open a billing session")
async def open_session(
    details: Optional[SessionDetails] = None,
    storage: Storage = Depends(get_storage),
    catalog: MenuCatalog = Depends(get_catalog),
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    """Open a session against the current menu (picks up items seeded since startup)."""
    catalog.load(storage.list_menu_items())
    session = BillingSession(
        aggregator=OrderAggregator(catalog),
        commit_service=BillCommitService(storage),
        sequencer=BillSequencer(storage),
    )
    if details is not None:
        _apply_details(session, details)
    registry.add(session)
    return session.snapshot()


@router.get("/{session_id}", summary="Current order of a session")
async def get_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    return _get_billing_session(registry, session_id).snapshot()


@router.patch("/{session_id}", summary="Update table, party, waiter or area")
async def update_session(
    session_id: str,
    details: SessionDetails,
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    session = _get_billing_session(registry, session_id)
    _apply_details(session, details)
    return session.snapshot()


@router.post("/{session_id}/items", summary="Enter an item code (alpha or numeric)")
async def submit_item_code(
    session_id: str,
    request: SubmitCodeRequest,
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    session = _get_billing_session(registry, session_id)
    session.submit_code(request.code)
    return session.snapshot()


@router.put("/{session_id}/items/{menu_id}", summary="Set a line's quantity (0 removes it)")
async def set_item_quantity(
    session_id: str,
    menu_id: int,
    request: QuantityRequest,
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    session = _get_billing_session(registry, session_id)
    session.set_quantity(menu_id, request.quantity)
    return session.snapshot()


@router.post("/{session_id}/finalize", summary="Commit the order as a bill")
async def finalize_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    """
    Commit the session's order. On success the session starts a new empty
    order; on failure the order is kept so finalize can simply be retried.
    """
    session = _get_billing_session(registry, session_id)
    record = session.finalize()
    return {"bill": record.to_dict(), "session": session.snapshot()}


@router.delete("/{session_id}", summary="Abandon the session and its order")
async def abandon_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    session = _get_billing_session(registry, session_id)
    session.abandon()
    registry.remove(session_id)
    return {"status": "ok", "sessionId": session_id}
