"""Skill cache, state store and enable/disable engine."""
