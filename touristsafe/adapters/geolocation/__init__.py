from .reported import ReportedPositionProvider

__all__ = ["ReportedPositionProvider"]
