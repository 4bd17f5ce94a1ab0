from membership.routers import auth, dashboard, families, health, transfer, users

__all__ = [
    "health",
    "auth",
    "families",
    "users",
    "transfer",
    "dashboard",
]
