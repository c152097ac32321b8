from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.user_id == user_id)
        ).scalar_one_or_none()

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def list_emails(self) -> List[str]:
        return list(self.db.execute(select(UserModel.email).order_by(UserModel.id)).scalars())
