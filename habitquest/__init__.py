"""habitquest - gamification engine for habit and goal tracking"""

__version__ = "0.1.0"
