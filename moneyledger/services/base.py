"""
Shared service plumbing: rejection logging, ownership lookups and the
archive/restore/delete lifecycle common to currencies, categories and sources.
"""

from functools import wraps
from typing import Generic, List, Optional, TypeVar

from ..exceptions import ArchivedReference, LedgerError, NotFound, RestrictViolation, UniqueViolation
from ..repositories.base import DatabaseConnection, NamedRepository, OwnedRepository
from ..repositories.user_repository import UserRepository
from ..utils.secure_logging import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


def logged_operation(operation: str):
    """Decorator that logs rejected ledger operations and re-raises."""

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except LedgerError as e:
                logger.warning(
                    "Operation rejected",
                    operation=operation,
                    error_type=type(e).__name__,
                    field=e.field,
                    message=e.message,
                )
                raise

        return wrapper

    return decorator


def load_owned(
    repository: OwnedRepository,
    user_id: int,
    entity_id: Optional[int],
    field: str,
    allow_archived: bool = True,
):
    """
    Load a row that must belong to user_id.

    Args:
        repository: Repository for the referenced table
        user_id: Expected owner
        entity_id: Referenced row id
        field: Field name reported on failure
        allow_archived: Accept soft-deleted rows

    Raises:
        NotFound: If the row does not exist or belongs to another user
        ArchivedReference: If the row is archived and allow_archived is False
    """
    entity = repository.find_owned(user_id, entity_id) if entity_id is not None else None
    if entity is None:
        raise NotFound(f"{field} {entity_id} not found for user {user_id}", field, entity_id)
    if entity.archived and not allow_archived:
        raise ArchivedReference(f"{field} {entity_id} is archived", field, entity_id)
    return entity


class CatalogService(Generic[T]):
    """Lifecycle operations for named, user-owned rows."""

    entity_name = "entity"

    def __init__(self, db_connection: DatabaseConnection, repository: NamedRepository):
        self.db = db_connection
        self.repository = repository
        self.users = UserRepository(db_connection)

    def _require_user(self, user_id: int):
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFound(f"User {user_id} not found", "user_id", user_id)
        return user

    def _get(self, user_id: int, entity_id: int) -> T:
        return load_owned(self.repository, user_id, entity_id, f"{self.entity_name}_id")

    def _list(self, user_id: int, include_archived: bool = False) -> List[T]:
        return self.repository.find_by_user(user_id, include_archived)

    def _ensure_unique_name(self, user_id: int, name: str, exclude_id: Optional[int] = None) -> None:
        existing = self.repository.find_by_name(user_id, name)
        if existing is not None and existing.id != exclude_id:
            raise UniqueViolation(
                f"{self.entity_name} '{name}' already exists for user {user_id}", "name", name
            )

    def _set_archived(self, user_id: int, entity_id: int, archived: bool) -> T:
        with self.db.transaction():
            entity = self._get(user_id, entity_id)
            if entity.archived != archived:
                self.repository.set_archived(entity_id, archived)
                logger.info(
                    f"{self.entity_name.capitalize()} {'archived' if archived else 'restored'}",
                    user_id=user_id,
                    entity_id=entity_id,
                )
            return self.repository.find_by_id(entity_id)

    def _before_delete(self, entity_id: int) -> None:
        """Hook run inside the delete transaction, before the row goes."""

    def _delete(self, user_id: int, entity_id: int) -> None:
        """Hard delete, blocked while anything still references the row."""
        with self.db.transaction():
            self._get(user_id, entity_id)
            references = self.repository.count_references(entity_id)
            if any(references.values()):
                detail = ", ".join(f"{count} {table}" for table, count in references.items() if count)
                raise RestrictViolation(
                    f"{self.entity_name} {entity_id} is still referenced by {detail}",
                    f"{self.entity_name}_id",
                    entity_id,
                )
            self._before_delete(entity_id)
            self.repository.delete(entity_id)
            logger.info(
                f"{self.entity_name.capitalize()} deleted", user_id=user_id, entity_id=entity_id
            )
