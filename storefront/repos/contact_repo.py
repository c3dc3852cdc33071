# storefront/repos/contact_repo.py
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from storefront.data.models.contact import ContactThreadModel, ContactReplyModel


class ContactRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_thread(self, thread_id: str) -> ContactThreadModel | None:
        return self.db.get(ContactThreadModel, thread_id)

    def create_thread(self, thread: ContactThreadModel) -> ContactThreadModel:
        self.db.add(thread)
        self.db.commit()
        self.db.refresh(thread)
        return thread

    def list_threads(self, offset: int, limit: int, user_id: str | None = None) -> tuple[list[ContactThreadModel], int]:
        query = select(ContactThreadModel)
        count_query = select(func.count()).select_from(ContactThreadModel)
        if user_id is not None:
            query = query.where(ContactThreadModel.user_id == user_id)
            count_query = count_query.where(ContactThreadModel.user_id == user_id)

        total = self.db.execute(count_query).scalar_one()
        items = self.db.execute(
            query.order_by(ContactThreadModel.created_at.desc()).offset(offset).limit(limit)
        ).scalars()
        return list(items), total

    def add_reply(self, thread: ContactThreadModel, reply: ContactReplyModel) -> ContactThreadModel:
        thread.replies.append(reply)
        self.db.commit()
        self.db.refresh(thread)
        return thread

    def commit(self, thread: ContactThreadModel) -> ContactThreadModel:
        self.db.commit()
        self.db.refresh(thread)
        return thread
