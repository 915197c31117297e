from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from apps.accounts.access import AccessContext


class AccessContextMixin:
    """
    Resolves the request's AccessContext once and caches it on the request.
    All API views that call services should inherit from this.
    """
    permission_classes = [IsAuthenticated]

    def get_access(self) -> AccessContext:
        access = getattr(self.request, 'access', None)
        if access is None:
            access = AccessContext.for_user(self.request.user)
            self.request.access = access
        return access


class BaseScopedViewSet(AccessContextMixin, viewsets.GenericViewSet):
    """
    Base ViewSet whose queryset is filtered by scope_queryset().
    Subclasses provide the visibility rule for their model.
    """

    def scope_queryset(self, queryset, access):
        return queryset

    def get_queryset(self):
        queryset = super().get_queryset()
        return self.scope_queryset(queryset, self.get_access())
