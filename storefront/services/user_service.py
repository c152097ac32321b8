from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel
from storefront.domain.errors import NotFoundError
from storefront.domain.schemas import UserCreate, UserRead
from storefront.repos.user_repo import UserRepo


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        existing = self.repo.get_user(payload.user_id)
        if existing:
            return UserRead.model_validate(existing)

        user = UserModel(user_id=payload.user_id, name=payload.name, email=payload.email)
        created = self.repo.create_user(user)
        return UserRead.model_validate(created)

    def get_user(self, user_id: str) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found", details={"userId": user_id})
        return UserRead.model_validate(user)
