from .contents import ContentRepository

__all__ = ["ContentRepository"]
