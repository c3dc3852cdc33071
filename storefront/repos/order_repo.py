# storefront/repos/order_repo.py
from datetime import datetime, timezone
from sqlalchemy import select, func
from sqlalchemy.orm import Session
from storefront.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order

    def get_order(self, order_id: str) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_by_idempotency_key(self, key: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.idempotency_key == key)
        ).scalar_one_or_none()

    def list_for_user(self, user_id: str) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.user_id == user_id)
                .order_by(OrderModel.created_at.desc())
            ).scalars()
        )

    def list_orders(self, offset: int, limit: int, status: str | None = None) -> tuple[list[OrderModel], int]:
        query = select(OrderModel)
        count_query = select(func.count()).select_from(OrderModel)
        if status:
            query = query.where(OrderModel.status == status)
            count_query = count_query.where(OrderModel.status == status)

        total = self.db.execute(count_query).scalar_one()
        items = self.db.execute(
            query.order_by(OrderModel.created_at.desc()).offset(offset).limit(limit)
        ).scalars()
        return list(items), total

    def update_order(self, order: OrderModel, **fields) -> OrderModel:
        for name, value in fields.items():
            setattr(order, name, value)
        order.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(order)
        return order

    def rollback(self):
        self.db.rollback()
