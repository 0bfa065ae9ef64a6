"""Expose handler modules for easy import."""

from . import commands, membership

__all__ = ["commands", "membership"]
