from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date
from database import get_db
from schemas.financial_reports import TrialBalance
from crud import financial_reports as reports_crud

router = APIRouter(
    prefix="/financial-reports",
    tags=["Financial Reports"],
)


@router.get("/trial-balance", response_model=TrialBalance)
def get_trial_balance(as_of_date: Optional[date] = None, db: Session = Depends(get_db)):
    return reports_crud.get_trial_balance_report(db, as_of_date=as_of_date)


@router.get("/trial-balance/export")
def export_trial_balance(as_of_date: Optional[date] = None, db: Session = Depends(get_db)):
    excel_file = reports_crud.export_trial_balance(db, as_of_date=as_of_date)
    suffix = as_of_date.isoformat() if as_of_date else "current"
    headers = {
        'Content-Disposition': f'attachment; filename="trial_balance_{suffix}.xlsx"'
    }
    return StreamingResponse(
        excel_file,
        media_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        headers=headers,
    )
