"""Tests for logging setup"""
import logging
from unittest.mock import patch

from habitquest.logging_config import setup_logging


def test_setup_logging_uses_level():
    """Test the level name is resolved on the root config"""
    with patch("habitquest.logging_config.logging.basicConfig") as basic_config:
        setup_logging("debug")

    kwargs = basic_config.call_args.kwargs
    assert kwargs["level"] == logging.DEBUG
    assert kwargs["format"] == '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def test_setup_logging_unknown_level_defaults_to_info():
    """Test unknown level names fall back to INFO"""
    with patch("habitquest.logging_config.logging.basicConfig") as basic_config:
        setup_logging("chatty")

    assert basic_config.call_args.kwargs["level"] == logging.INFO
