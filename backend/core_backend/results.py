"""
Discriminated success/failure result returned by service operations.

Views branch on ``result.ok`` and never need to catch service exceptions.
A successful result may still be ``degraded`` (the operation completed but
left an inconsistency the consistency sweep must reconcile); the reasons are
listed in ``warnings``.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

from .errors import ServiceError


@dataclass
class ServiceResult:
    ok: bool
    value: Any = None
    error: Optional[ServiceError] = None
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def success(cls, value=None, warnings=None):
        return cls(ok=True, value=value, warnings=list(warnings or []))

    @classmethod
    def failure(cls, error: ServiceError):
        return cls(ok=False, error=error)

    @property
    def degraded(self) -> bool:
        return self.ok and bool(self.warnings)
