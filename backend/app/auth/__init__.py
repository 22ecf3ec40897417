# app/auth/__init__.py
"""
Authentication modules for the candidate directory.

This package contains:
- identity.py: Canonical authenticated identity model (tenant-qualified)
"""
from app.auth.identity import Identity

__all__ = ["Identity"]
