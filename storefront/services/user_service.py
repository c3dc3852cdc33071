from sqlalchemy.orm import Session
from storefront.data.models.user import UserModel
from storefront.domain.identity import Identity
from storefront.repos.user_repo import UserRepo
from storefront.domain.schemas import UserCreate, UserRead


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def register(self, identity: Identity, payload: UserCreate) -> UserRead:
        existing = self.repo.get_user(identity.uid)
        if existing:
            existing.name = payload.name
            existing.email = payload.email or existing.email
            existing.role = identity.role
            return UserRead.model_validate(self.repo.save(existing))

        user = UserModel(id=identity.uid, name=payload.name, email=payload.email or identity.email, role=identity.role)
        return UserRead.model_validate(self.repo.create_user(user))

    def get_user(self, user_id: str) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise LookupError("User not found")
        return UserRead.model_validate(user)
