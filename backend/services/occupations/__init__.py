"""Occupation providers and the coordinator that merges their results."""
