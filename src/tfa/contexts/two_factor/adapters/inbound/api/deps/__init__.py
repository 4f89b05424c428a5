from .current_user import DEFAULT_USER_ID_HEADER, RequireUserIdHeaderDependency

__all__ = [
    "DEFAULT_USER_ID_HEADER",
    "RequireUserIdHeaderDependency",
]
