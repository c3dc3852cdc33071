from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from storefront.api.auth import get_identity
from storefront.data.database import get_db
from storefront.domain.identity import Identity
from storefront.services.user_service import UserService
from storefront.domain.schemas import UserCreate, UserRead

router = APIRouter(prefix="/users", tags=["users"])

@router.post("", response_model=UserRead)
def register_user(payload: UserCreate, identity: Identity = Depends(get_identity), db: Session = Depends(get_db)):
    service = UserService(db)
    return service.register(identity, payload)

@router.get("/me", response_model=UserRead)
def get_me(identity: Identity = Depends(get_identity), db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.get_user(identity.uid)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
