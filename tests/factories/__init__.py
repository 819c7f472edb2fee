"""Factory Boy factories for catalog test data.

Available factories
-------------------
AIServiceFactory       : AI service dict (availability search result)
AIVideoFactory         : AI video dict
CurationFactory        : curation dict
ServiceOrderRowFactory : stored ordering row of an AI-service scope
VideoOrderRowFactory   : stored ordering row of the homepage video scope
"""

from __future__ import annotations

from tests.factories.catalog import (
    AIServiceFactory,
    AIVideoFactory,
    CurationFactory,
    ServiceOrderRowFactory,
    VideoOrderRowFactory,
    envelope,
    service_rows,
)

__all__ = [
    "AIServiceFactory",
    "AIVideoFactory",
    "CurationFactory",
    "ServiceOrderRowFactory",
    "VideoOrderRowFactory",
    "envelope",
    "service_rows",
]
