"""Repository facades exposing typed accessors over low-level mixins.

Each repository satisfies the matching protocol in ``app.domain.repositories``::

    from infrastructure.database.repositories import AnalysisRepository
"""

from infrastructure.database.repositories.analyses import AnalysisRepository
from infrastructure.database.repositories.care import CareScheduleRepository

__all__ = [
    "AnalysisRepository",
    "CareScheduleRepository",
]
