"""Logging setup"""
import logging

from habitquest.config import LOG_LEVEL


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure root logging for applications embedding the engine"""
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, level.upper(), logging.INFO)
    )
