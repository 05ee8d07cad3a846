"""Service modules"""
from .dispatch import DispatchEngine

__all__ = ["DispatchEngine"]
