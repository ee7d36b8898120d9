"""Consumer spending summary and its PDF export."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from grocer.api.deps import consumer_session, get_api_client
from grocer.domain.Order import Order
from grocer.domain.PantryItem import PantryItem
from grocer.domain.Session import Session
from grocer.infra.Api_Client import ApiClient
from grocer.infra.pdf_utils import generate_pdf_for_expenses
from grocer.logic.reporting.expenses import aggregate_expenses

router = APIRouter(prefix="/api/expenses")
logger = logging.getLogger(__name__)


def _summary(client: ApiClient, session: Session, timeframe: str) -> dict:
    orders = [Order.from_dict(r) for r in client.list_orders(session.user_id)]
    orders = [o for o in orders if o.customer_id == session.user_id]
    refills = [PantryItem.from_dict(r) for r in client.user_pantry(session.user_id)]
    try:
        return aggregate_expenses(orders, refills, timeframe)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("")
def get_expenses(timeframe: str = Query("all"), session: Session = Depends(consumer_session),
                 client: ApiClient = Depends(get_api_client)):
    return _summary(client, session, timeframe)


@router.get("/export_pdf")
def export_pdf(timeframe: str = Query("all"), session: Session = Depends(consumer_session),
               client: ApiClient = Depends(get_api_client)):
    summary = _summary(client, session, timeframe)
    pdf_bytes = generate_pdf_for_expenses(summary, session.name)
    logger.info("Expense statement (%s) exported for %s", timeframe, session)

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename=expenses_{timeframe}.pdf"
        },
    )
