"""
API Package
"""
from apiforge.api import databases, tables, endpoints

__all__ = ["databases", "tables", "endpoints"]
