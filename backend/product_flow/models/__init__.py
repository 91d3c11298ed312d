from .idea import Idea
from .kb_document import KBDocument
from .portfolio import Portfolio
from .studio import Studio, StudioUser

__all__ = ["Idea", "KBDocument", "Portfolio", "Studio", "StudioUser"]
