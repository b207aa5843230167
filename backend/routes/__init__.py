from routes.customers import router as customers_router
from routes.products import router as products_router
from routes.users import router as users_router

__all__ = ["customers_router", "products_router", "users_router"]
