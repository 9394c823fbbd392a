"""Profile storage, diffing and the profile service."""
