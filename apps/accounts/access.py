"""
Request-scoped access claims.

AccessContext is resolved once per request from the authenticated user and
passed to every service call, so business rules never look at raw user ids
or permission string lists.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from apps.accounts.models import WILDCARD, Capability, Profile
from apps.companies.models import Company
from apps.core.exceptions import AuthorizationError


@dataclass(frozen=True)
class AccessContext:
    user: object
    company: Optional[Company] = None
    is_super_admin: bool = False
    capabilities: frozenset = field(default_factory=frozenset)

    @classmethod
    def for_user(cls, user) -> 'AccessContext':
        if user is None or not user.is_authenticated:
            raise AuthorizationError("Não autenticado")

        profile = Profile.objects.select_related('company__category', 'role').filter(user=user).first()
        is_super_admin = bool(user.is_superuser or (profile and profile.is_super_admin))

        capabilities = set()
        if is_super_admin:
            capabilities.add(WILDCARD)
        elif profile:
            if profile.role:
                capabilities |= profile.role.capabilities
            # Per-user flags complement the role
            if profile.can_create_order:
                capabilities.add(Capability.CREATE_ORDERS.value)
            if profile.can_confirm_delivery:
                capabilities.add(Capability.CONFIRM_DELIVERY.value)
            if profile.can_create_purchase_order:
                capabilities.add(Capability.CREATE_PURCHASE_ORDERS.value)

        return cls(
            user=user,
            company=profile.company if profile else None,
            is_super_admin=is_super_admin,
            capabilities=frozenset(capabilities),
        )

    @property
    def user_id(self):
        return self.user.pk

    @property
    def display_name(self):
        full_name = self.user.get_full_name() if hasattr(self.user, 'get_full_name') else ''
        return full_name or self.user.get_username()

    def has_capability(self, capability) -> bool:
        if self.is_super_admin or WILDCARD in self.capabilities:
            return True
        value = capability.value if isinstance(capability, Capability) else capability
        return value in self.capabilities

    def require_capability(self, capability):
        if not self.has_capability(capability):
            label = capability.label if isinstance(capability, Capability) else capability
            raise AuthorizationError(f"Permissão '{label}' necessária")

    def require_super_admin(self):
        if not self.is_super_admin:
            raise AuthorizationError("Apenas o super administrador pode executar esta operação")
