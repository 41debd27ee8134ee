"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - SwapRequest is the aggregate the negotiation engine mutates; Book and Profile
      are thin mirrors of external collaborators

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all / autogenerate
"""

from app.models.profile import Profile  # noqa: F401
from app.models.book import Book  # noqa: F401
from app.models.swap_request import SwapRequest  # noqa: F401
from app.models.notification import Notification  # noqa: F401
