from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from database import get_db
from schemas.account_type import AccountType, AccountTypeWithCount
from crud import account_type as account_type_crud

router = APIRouter(
    prefix="/account-types",
    tags=["Account Types"],
)


@router.get("/", response_model=List[AccountTypeWithCount])
def get_account_types(db: Session = Depends(get_db)):
    return account_type_crud.get_account_types(db)


@router.post("/seed", response_model=List[AccountType], status_code=status.HTTP_201_CREATED)
def seed_account_types(db: Session = Depends(get_db)):
    """Create the five standard account types where they are missing."""
    return account_type_crud.seed_account_types(db)
