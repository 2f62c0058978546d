from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from schemas.dues import PublicDuesOut
from services.lookup import dues_for

router = APIRouter(prefix="/public", tags=["Public Lookup"])


# No login: anyone holding a roll number or faculty id may see its pending dues
@router.get("/dues/{person_id}", response_model=PublicDuesOut)
def public_dues_lookup(person_id: str, db: Session = Depends(get_db)):
    return PublicDuesOut.model_validate(dues_for(db, person_id))
