from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
)

from apps.orders.api_views import DeliveryOrderViewSet, TrackingPointCreateView
from apps.procurement.api_views import PurchaseOrderViewSet

router = DefaultRouter()
router.register(r'orders', DeliveryOrderViewSet, basename='api-order')
router.register(r'purchase-orders', PurchaseOrderViewSet, basename='api-purchase-order')

urlpatterns = [
    # Auth
    path('auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # Driver app tracking
    path('tracking-points/', TrackingPointCreateView.as_view(), name='api-tracking-point'),

    # Generic Router
    path('', include(router.urls)),
]
