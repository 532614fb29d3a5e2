"""Employee directory and the reporting relation.

The directory is a frozen snapshot; ``add``, ``update`` and ``remove`` return
a new ``Directory``. Integrity is only checked on write and only loosely:
manager references must exist when set, but cycles are not detected and
removing a user leaves their reports' ``manager_id`` dangling.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from .errors import InvalidUserError, UnknownUserError
from .models import Role, User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Directory:
    users: tuple[User, ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, users: Iterable[User]) -> Directory:
        return cls(tuple(users))

    def get(self, user_id: str | None) -> User | None:
        if not user_id:
            return None
        return next((u for u in self.users if u.id == user_id), None)

    def __contains__(self, user_id: object) -> bool:
        return any(u.id == user_id for u in self.users)

    def manager_of(self, user_id: str) -> User | None:
        """Return the user's manager, or None if unset, dangling or unknown."""
        user = self.get(user_id)
        if user is None:
            return None
        return self.get(user.manager_id)

    def reports_of(self, manager_id: str) -> list[User]:
        return [u for u in self.users if u.manager_id == manager_id]

    def potential_managers(self, exclude_id: str | None = None) -> list[User]:
        """Managers and HR a user could report to (advisory; not enforced)."""
        return [
            u
            for u in self.users
            if u.id != exclude_id and u.role in (Role.MANAGER, Role.HR)
        ]

    def add(self, user: User) -> Directory:
        if user.id in self:
            raise InvalidUserError(user.id, ["a user with this id already exists"])
        self._validate(user)
        logger.info("Directory: added %s (%s)", user.id, user.role.value)
        return Directory((*self.users, user))

    def update(self, user: User) -> Directory:
        if user.id not in self:
            raise UnknownUserError(user.id)
        self._validate(user)
        logger.info("Directory: updated %s", user.id)
        return Directory(tuple(user if u.id == user.id else u for u in self.users))

    def remove(self, user_id: str) -> Directory:
        """Remove a user. Their timesheets and their reports are left alone."""
        if user_id not in self:
            return self
        logger.info("Directory: removed %s", user_id)
        return Directory(tuple(u for u in self.users if u.id != user_id))

    def _validate(self, user: User) -> None:
        problems: list[str] = []
        if not (user.name or "").strip():
            problems.append("name is required")
        if not isinstance(user.role, Role):
            problems.append(f"unknown role {user.role!r}")
        if user.manager_id and user.manager_id not in self:
            problems.append(f"manager {user.manager_id} does not exist")
        if problems:
            raise InvalidUserError(user.id, problems)
