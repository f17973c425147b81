from dataclasses import dataclass
from enum import Enum

from fastapi import Depends, Header

from rewards_service.errors import Forbidden, Unauthorized


class Capability(str, Enum):
    REDEEM_REWARDS = "rewards:redeem"
    VIEW_HISTORY = "rewards:history"
    VIEW_WALLET = "wallet:read"
    ADMIN_REWARDS = "rewards:admin"


ROLE_CAPABILITIES: dict[str, frozenset[Capability]] = {
    "user": frozenset({
        Capability.REDEEM_REWARDS,
        Capability.VIEW_HISTORY,
        Capability.VIEW_WALLET,
    }),
    "admin": frozenset(Capability),
}


@dataclass(frozen=True)
class RequestContext:
    user_id: str
    role: str = "user"

    @property
    def capabilities(self) -> frozenset[Capability]:
        return ROLE_CAPABILITIES.get(self.role, frozenset())

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities


def get_request_context(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    x_user_role: str | None = Header(default=None, alias="X-User-Role"),
) -> RequestContext:
    """Identity is resolved upstream (auth gateway) and forwarded as headers."""
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise Unauthorized("Unauthorized: No user context provided")
    role = (x_user_role or "user").strip().lower()
    return RequestContext(user_id=user_id, role=role)


def requires(capability: Capability):
    def _check(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
        if not ctx.can(capability):
            raise Forbidden(f"Forbidden: {capability.value} required")
        return ctx

    return _check
