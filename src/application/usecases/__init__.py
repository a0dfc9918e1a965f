# Use Cases
from src.application.usecases.find_subtitle import (
    FindSubtitleConfig,
    FindSubtitleResult,
    FindSubtitleUseCase,
)

__all__ = [
    "FindSubtitleUseCase",
    "FindSubtitleConfig",
    "FindSubtitleResult",
]
