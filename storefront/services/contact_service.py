# storefront/services/contact_service.py
from typing import Dict, Any
from sqlalchemy.orm import Session

from storefront.data.models.contact import ContactThreadModel, ContactReplyModel
from storefront.domain.identity import Identity
from storefront.domain.schemas import ContactCreate
from storefront.repos.contact_repo import ContactRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def serialize_thread(thread: ContactThreadModel) -> Dict[str, Any]:
    return {
        "id": thread.id,
        "user_id": thread.user_id,
        "name": thread.name,
        "email": thread.email,
        "message": thread.message,
        "handled": thread.handled,
        "created_at": thread.created_at,
        "unread_by_user": thread.unread_by_user,
        "unread_by_admin": thread.unread_by_admin,
        "replies": [
            {
                "sender_role": r.sender_role,
                "message": r.message,
                "created_at": r.created_at,
                "read_by_user": r.read_by_user,
                "read_by_admin": r.read_by_admin,
            }
            for r in thread.replies
        ],
    }


class ContactService:
    """Message threads between customers and staff, only as far as the unread badges need them."""

    def __init__(self, db: Session):
        self.repo = ContactRepo(db)

    def create_thread(self, identity: Identity | None, payload: ContactCreate):
        thread = ContactThreadModel(
            user_id=identity.uid if identity else None,
            name=payload.name or (identity.name if identity else None) or "Guest",
            email=payload.email or (identity.email if identity else "") or "",
            message=payload.message,
            unread_by_admin=1,
        )
        created = self.repo.create_thread(thread)
        logger.info(f"Contact thread {created.id} opened")
        return serialize_thread(created)

    def list_threads(self, page: int, limit: int, identity: Identity | None = None):
        offset = (max(page, 1) - 1) * limit
        threads, total = self.repo.list_threads(offset, limit, user_id=identity.uid if identity else None)
        return {"items": [serialize_thread(t) for t in threads], "total": total}

    def _get(self, thread_id: str) -> ContactThreadModel:
        thread = self.repo.get_thread(thread_id)
        if not thread:
            raise LookupError("Thread does not exist")
        return thread

    def reply(self, thread_id: str, identity: Identity, message: str):
        thread = self._get(thread_id)
        if identity.is_admin:
            role = "admin"
            thread.unread_by_user += 1
            thread.handled = True
        elif thread.user_id == identity.uid:
            role = "user"
            thread.unread_by_admin += 1
        else:
            raise PermissionError("No access to this thread")

        reply = ContactReplyModel(
            sender_role=role,
            message=message,
            read_by_user=role == "user",
            read_by_admin=role == "admin",
        )
        return serialize_thread(self.repo.add_reply(thread, reply))

    def mark_read(self, thread_id: str, identity: Identity, actor: str):
        thread = self._get(thread_id)
        if actor == "admin":
            if not identity.is_admin:
                raise PermissionError("Admin access required")
            thread.unread_by_admin = 0
            for r in thread.replies:
                r.read_by_admin = True
        else:
            if thread.user_id != identity.uid:
                raise PermissionError("No access to this thread")
            thread.unread_by_user = 0
            for r in thread.replies:
                r.read_by_user = True
        return serialize_thread(self.repo.commit(thread))
