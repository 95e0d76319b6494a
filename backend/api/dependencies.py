"""Shared dependencies for API routes."""

from services import generation


def get_generation_runner():
    return generation.run_generation
