"""
Shared FastAPI dependencies for the rate engine API.

The engine is stateless, so the only injected dependency is the settings
object (overridable in tests via ``app.dependency_overrides``).
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from rate_engine.core.config import Settings, get_settings

AppSettings = Annotated[Settings, Depends(get_settings)]
