"""Abstract store interface for the Department record and its version token."""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional, Union

from registrar.domain.common.result import Allowed, Blocked, Deleted, Gone, NotFound, Stale, Updated
from registrar.domain.department.models import Department


class DepartmentStore(ABC):

    @abstractmethod
    def create(self, values: Mapping[str, Any]) -> Department:
        """Insert a new department at version 1."""
        ...

    @abstractmethod
    def read(self, department_id: int) -> Optional[Department]:
        """Return the department with its current version, or None. No side effects."""
        ...

    @abstractmethod
    def list_all(self) -> List[Department]:
        ...

    @abstractmethod
    def update(
        self, department_id: int, patch: Mapping[str, Any], expected_version: int
    ) -> Union[Updated, Stale, Gone, NotFound]:
        """Atomically apply `patch` iff the stored version equals `expected_version`."""
        ...

    @abstractmethod
    def delete(
        self, department_id: int, expected_version: int
    ) -> Union[Deleted, Stale, Gone, NotFound, Blocked]:
        """Guarded, version-checked delete."""
        ...

    @abstractmethod
    def check_delete(self, department_id: int) -> Union[Allowed, Blocked, NotFound]:
        """Run only the dependency check, for a delete confirmation page."""
        ...
