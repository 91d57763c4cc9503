from fastapi import APIRouter, Depends
from sqlmodel import Session, text
from datetime import datetime

from app.database import get_session
from app.services.payment_gateway import PaymentGateway, get_payment_gateway

router = APIRouter()

@router.get("/check")
def health_check(
    session: Session = Depends(get_session),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    db_status = "ok"

    try:
        # simple DB ping
        session.exec(text("SELECT 1"))
    except Exception:
        db_status = "failed"

    return {
        "status": "ok",
        "database": db_status,
        "payment_gateway": gateway.name,
        "timestamp": datetime.utcnow().isoformat()
    }
