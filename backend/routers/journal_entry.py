from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date
from database import get_db
from schemas.journal_entry import JournalEntry, JournalEntryCreate, JournalEntryList, JournalEntryUpdate
from crud import journal_entry as journal_entry_crud

router = APIRouter(
    prefix="/journal-entries",
    tags=["Journal Entries"],
)


@router.post("/", response_model=JournalEntry, status_code=status.HTTP_201_CREATED)
def create_journal_entry(
    entry: JournalEntryCreate,
    post: bool = False,
    db: Session = Depends(get_db),
):
    """
    Create a journal entry with its lines.
    Debits must equal credits; pass `post=true` to post it in the same transaction.
    """
    return journal_entry_crud.create_journal_entry(db=db, entry=entry, post=post)


@router.get("/", response_model=JournalEntryList)
def get_journal_entries(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    is_posted: Optional[bool] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
):
    return journal_entry_crud.paginate_journal_entries(
        db,
        page=page,
        page_size=page_size,
        start_date=start_date,
        end_date=end_date,
        is_posted=is_posted,
    )


@router.get("/{entry_id}", response_model=JournalEntry)
def get_journal_entry(entry_id: int, db: Session = Depends(get_db)):
    db_entry = journal_entry_crud.get_journal_entry(db, entry_id=entry_id)
    if db_entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Journal entry not found")
    return db_entry


@router.patch("/{entry_id}", response_model=JournalEntry)
def update_journal_entry(entry_id: int, entry: JournalEntryUpdate, db: Session = Depends(get_db)):
    return journal_entry_crud.update_journal_entry(db, entry_id, entry)


@router.post("/{entry_id}/post", response_model=JournalEntry)
def post_journal_entry(entry_id: int, db: Session = Depends(get_db)):
    return journal_entry_crud.post_journal_entry(db, entry_id)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_journal_entry(entry_id: int, db: Session = Depends(get_db)):
    journal_entry_crud.delete_journal_entry(db, entry_id)
