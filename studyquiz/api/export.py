import json

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from studyquiz.core.auth import get_current_owner
from studyquiz.core.clock import utcnow
from studyquiz.core.database import get_db
from studyquiz.services.export import export_owner_data

router = APIRouter()


@router.get("/all")
def export_all(owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    now = utcnow()
    data = export_owner_data(db, owner_id, now=now)
    filename = f"studyquiz_data_{now.date().isoformat()}.json"
    return Response(
        content=json.dumps(data, indent=2),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
