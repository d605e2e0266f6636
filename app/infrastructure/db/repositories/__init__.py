from .analytics_repository import AnalyticsRepository
from .coupon_repository import CouponRepository
from .menu_repository import MenuRepository
from .order_repository import OrderRepository
from .settings_repository import SettingsRepository

__all__ = [
    "SettingsRepository",
    "CouponRepository",
    "OrderRepository",
    "MenuRepository",
    "AnalyticsRepository",
]
