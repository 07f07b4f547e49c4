"""Database models — re-exports all models.

Import from here:  from app.models import Opportunity
Or from submodules: from app.models.opportunity import Opportunity
"""

from .base import Base  # noqa: F401

# Sales pipeline
from .opportunity import Opportunity  # noqa: F401
