# backend/faultline/integrations/__init__.py
from __future__ import annotations

"""
Framework integrations.

- fastapi: report uncaught request exceptions as HTTP 500 responses
"""
