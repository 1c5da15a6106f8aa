# models/__init__.py
from .layout import ComponentType, ComponentInstance, QueryMeta, AppMeta
from .session import SessionContext, BuilderState
