from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.orm import Session

from studyquiz.api.common import CamelModel
from studyquiz.core.auth import get_current_owner
from studyquiz.core.database import get_db
from studyquiz.services import question_store

router = APIRouter()


class DocumentIn(CamelModel):
    title: str = Field(min_length=1, max_length=500)
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[int] = Field(default=None, ge=0)
    processed: bool = False


class DocumentOut(CamelModel):
    id: str
    title: str
    file_name: Optional[str]
    file_type: Optional[str]
    file_size: Optional[int]
    processed: bool
    upload_date: datetime


class DocumentList(CamelModel):
    documents: List[DocumentOut]


@router.get("", response_model=DocumentList)
def list_documents(owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    docs = question_store.list_documents(db, owner_id)
    return DocumentList(documents=[DocumentOut.model_validate(d) for d in docs])


@router.post("", response_model=DocumentOut, status_code=201)
def register_document(payload: DocumentIn, owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    doc = question_store.register_document(
        db, owner_id, payload.title,
        file_name=payload.file_name, file_type=payload.file_type,
        file_size=payload.file_size, processed=payload.processed,
    )
    return DocumentOut.model_validate(doc)
