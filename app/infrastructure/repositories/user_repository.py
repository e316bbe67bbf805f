"""Directory lookups over the user table."""

from __future__ import annotations

from sqlalchemy.orm import Session, joinedload

from app.domain.entities import Role, User, UserRole
from app.infrastructure.models import RoleModel, UserModel


class UserRepository:
    """Read access to users for authentication and recipient resolution."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User | None:
        model = self._get_model(id=user_id)
        return self._to_entity(model) if model else None

    def get_by_email(self, email: str) -> User | None:
        model = self._get_model(email=email)
        return self._to_entity(model) if model else None

    def list_active_user_ids_by_role(self, role: UserRole | str) -> list[str]:
        """Return ids of active, non-deleted users currently holding ``role``."""

        alias = UserRole(role).value
        query = (
            self.session.query(UserModel.id)
            .join(RoleModel, UserModel.role_id == RoleModel.id)
            .filter(UserModel.deleted.is_(False))
            .filter(UserModel.is_active.is_(True))
            .filter(RoleModel.alias == alias)
            .order_by(UserModel.id)
        )
        return [str(user_id) for (user_id,) in query.all()]

    def _get_model(self, **filters) -> UserModel | None:
        query = (
            self.session.query(UserModel)
            .options(joinedload(UserModel.role))
            .filter(UserModel.deleted.is_(False))
        )
        return query.filter_by(**filters).first()

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            role=Role(id=model.role.id, name=model.role.name, alias=model.role.alias),
            name=model.name,
            email=model.email,
            is_active=model.is_active,
            deleted=model.deleted,
            created_at=model.created_at,
        )


__all__ = ["UserRepository"]
