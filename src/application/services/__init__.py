"""Application services - Use case orchestration"""

from src.application.services.section_service import SectionService

__all__ = [
    'SectionService',
]
