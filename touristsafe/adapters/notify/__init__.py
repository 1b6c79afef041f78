from .feed import NoticeFeed

__all__ = ["NoticeFeed"]
