# services/builder.py
from fastapi import HTTPException
from typing import List, Optional
from models.layout import ComponentInstance, ComponentType, QueryMeta
from models.session import BuilderState
from services.layouts import LayoutService, add_component, remove_component, move_component
import logging

logger = logging.getLogger(__name__)

class BuilderSession:
    """Editing session for one app's layout.

    Holds the working component list next to a separate BuilderState, so
    selection and in-flight flags never leak into what gets saved.
    """

    def __init__(self, app_id: str, layout_service: LayoutService,
                 components: Optional[List[ComponentInstance]] = None):
        self.app_id = app_id
        self.layout_service = layout_service
        self.components: List[ComponentInstance] = list(components or [])
        self.state = BuilderState()
        self.queries: List[QueryMeta] = []

    async def load(self) -> List[ComponentInstance]:
        self.components = await self.layout_service.load_layout(self.app_id)
        try:
            self.queries = await self.layout_service.list_queries(self.app_id)
        except HTTPException as e:
            logger.error(f"Error fetching queries for app {self.app_id}: {e.detail}")
            self.queries = []
        self.state = BuilderState()
        return self.components

    def add(self, component_type: ComponentType) -> ComponentInstance:
        self.components = add_component(self.components, component_type)
        added = self.components[-1]
        self.state.selectedComponent = added.id
        self.state.dirty = True
        return added

    def remove(self, component_id: str) -> None:
        self.components = remove_component(self.components, component_id)
        if self.state.selectedComponent == component_id:
            self.state.selectedComponent = None
        self.state.dirty = True

    def move(self, component_id: str, direction: str) -> None:
        self.components = move_component(self.components, component_id, direction)
        self.state.dirty = True

    def select(self, component_id: Optional[str]) -> None:
        self.state.selectedComponent = component_id

    async def bind(self, query_id: str, component_id: Optional[str] = None) -> bool:
        """Bind a query to the given (or selected) component; False on failure"""
        target = component_id or self.state.selectedComponent
        if target is None:
            self.state.lastError = "Select a component before binding a query"
            return False

        self.state.bindingQuery = True
        try:
            self.components = await self.layout_service.bind_query(
                self.app_id, self.components, target, query_id, queries=self.queries or None
            )
            self.state.dirty = True
            self.state.lastError = None
            return True
        except HTTPException as e:
            logger.error(f"Error binding query {query_id} to component {target}: {e.detail}")
            self.state.lastError = f"Failed to execute query: {e.detail}"
            return False
        finally:
            self.state.bindingQuery = False

    async def save(self) -> bool:
        """Persist the layout; on failure the working components are kept for a retry"""
        self.state.saving = True
        try:
            await self.layout_service.save_layout(self.app_id, self.components)
            self.state.dirty = False
            self.state.lastError = None
            return True
        except HTTPException as e:
            logger.error(f"Error saving layout for app {self.app_id}: {e.detail}")
            self.state.lastError = f"Failed to save layout: {e.detail}"
            return False
        finally:
            self.state.saving = False
