# models/session.py
from typing import Optional
from pydantic import BaseModel, UUID4

class SessionContext(BaseModel):
    """Caller identity and credentials forwarded to the application backend"""
    user_id: Optional[UUID4] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None

class BuilderState(BaseModel):
    """Interaction state of the layout builder; never persisted with the layout"""
    selectedComponent: Optional[str] = None
    bindingQuery: bool = False
    saving: bool = False
    dirty: bool = False
    lastError: Optional[str] = None
