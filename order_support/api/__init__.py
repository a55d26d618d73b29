from order_support.api.server import create_app

__all__ = ["create_app"]
