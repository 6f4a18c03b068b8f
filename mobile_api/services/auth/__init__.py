from .guard import AuthGuard

__all__ = ["AuthGuard"]
