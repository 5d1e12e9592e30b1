"""AchieveHub: a student achievement showcase."""

__version__ = "1.0.0"
