"""grimoire - portable profiles and skills for AI coding assistants."""

__version__ = "0.1.0"
