"""Service layer"""
from habitquest.services.gamification_service import GamificationService

__all__ = ["GamificationService"]
