from dataclasses import dataclass
from typing import Any, Optional

from core.exceptions import UnauthorizedError


@dataclass(frozen=True)
class AccountContext:
    """Who a service call acts for. Built once per request and passed down."""
    tenant_id: int
    user: Optional[Any] = None

    @property
    def user_id(self):
        return self.user.pk if self.user is not None else None

    @classmethod
    def from_request(cls, request):
        user = getattr(request, 'user', None)
        if not user or not user.is_authenticated or getattr(user, 'tenant_id', None) is None:
            raise UnauthorizedError()
        return cls(tenant_id=user.tenant_id, user=user)

    @classmethod
    def for_tenant(cls, tenant_id):
        """Context for background jobs that run without a user."""
        return cls(tenant_id=tenant_id)
