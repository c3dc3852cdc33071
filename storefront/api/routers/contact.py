# storefront/api/routers/contact.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.auth import get_identity, get_optional_identity, require_admin
from storefront.data.database import get_db
from storefront.domain.identity import Identity
from storefront.domain.schemas import ContactCreate, ReadIn, ReplyIn, ThreadListOut, ThreadOut
from storefront.services.contact_service import ContactService

router = APIRouter(prefix="/contact", tags=["contact"])


def get_service(db: Session = Depends(get_db)):
    return ContactService(db)


@router.post("", response_model=ThreadOut, status_code=201)
def create_thread(
    payload: ContactCreate,
    identity: Identity | None = Depends(get_optional_identity),
    svc: ContactService = Depends(get_service),
):
    return svc.create_thread(identity, payload)


@router.get("/my", response_model=ThreadListOut)
def my_threads(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    identity: Identity = Depends(get_identity),
    svc: ContactService = Depends(get_service),
):
    return svc.list_threads(page, limit, identity=identity)


@router.get("", response_model=ThreadListOut)
def all_threads(
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1, le=500),
    _admin: Identity = Depends(require_admin),
    svc: ContactService = Depends(get_service),
):
    return svc.list_threads(page, limit)


@router.post("/{thread_id}/reply", response_model=ThreadOut)
def reply(
    thread_id: str,
    payload: ReplyIn,
    identity: Identity = Depends(get_identity),
    svc: ContactService = Depends(get_service),
):
    try:
        return svc.reply(thread_id, identity, payload.message)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{thread_id}/read", response_model=ThreadOut)
def mark_read(
    thread_id: str,
    payload: ReadIn,
    identity: Identity = Depends(get_identity),
    svc: ContactService = Depends(get_service),
):
    try:
        return svc.mark_read(thread_id, identity, payload.actor)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
