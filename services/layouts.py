# services/layouts.py
from fastapi import HTTPException
from typing import List, Dict, Any, Optional
from models.layout import ComponentInstance, ComponentType, QueryMeta
from models.session import SessionContext
from services.backend_client import BackendClient
from pydantic import ValidationError
import asyncio
import logging

logger = logging.getLogger(__name__)

#
# Layout editing (pure; every operation returns a new list)
#
def add_component(components: List[ComponentInstance], component_type: ComponentType) -> List[ComponentInstance]:
    return [*components, ComponentInstance.create(ComponentType(component_type))]

def remove_component(components: List[ComponentInstance], component_id: str) -> List[ComponentInstance]:
    return [component for component in components if component.id != component_id]

def move_component(components: List[ComponentInstance], component_id: str, direction: str) -> List[ComponentInstance]:
    """Swap a component with its neighbour; moving past either end is a no-op"""
    if direction not in ("up", "down"):
        raise ValueError(f"Unknown move direction '{direction}'")

    index = find_component_index(components, component_id)
    target = index - 1 if direction == "up" else index + 1
    if target < 0 or target >= len(components):
        return list(components)

    reordered = list(components)
    reordered[index], reordered[target] = reordered[target], reordered[index]
    return reordered

def find_component_index(components: List[ComponentInstance], component_id: str) -> int:
    for index, component in enumerate(components):
        if component.id == component_id:
            return index
    raise HTTPException(status_code=404, detail=f"Component {component_id} not found in layout")

def strip_data(components: List[ComponentInstance]) -> List[Dict[str, Any]]:
    """Persistable layout: order and every field kept, query results dropped"""
    return [component.persisted() for component in components]

class LayoutService:
    """Load, save and bind operations for one caller's Layout Documents.

    Loading re-executes every bound query on every load. That keeps the data
    fresh at the cost of one backend query per bound component; the
    executions run concurrently so latency tracks the slowest query.
    Saves overwrite the stored layout wholesale (last write wins). Persisted
    entries that fail validation, such as an unknown component type, are left
    out of the loaded list, so saving that list afterwards removes them from
    the stored layout.
    """

    def __init__(self, session: Optional[SessionContext] = None, client: Optional[BackendClient] = None):
        self.session = session or SessionContext()
        self.client = client or BackendClient(self.session)

    async def load_layout(self, app_id: str) -> List[ComponentInstance]:
        raw_layout = await self.client.get_layout(app_id)
        logger.info(f"Loaded layout for app {app_id} with {len(raw_layout)} components")

        components = []
        for item in raw_layout:
            try:
                components.append(ComponentInstance.model_validate(item))
            except ValidationError as e:
                item_id = item.get('id') if isinstance(item, dict) else None
                logger.error(f"Validation error for component {item_id} in app {app_id}, "
                             f"it will be dropped on the next save: {str(e)}")
                # Continue with the remaining components
                continue

        # results come back in input order, so layout order never depends on completion order
        return list(await asyncio.gather(
            *(self._refresh_component(app_id, component) for component in components)
        ))

    async def _refresh_component(self, app_id: str, component: ComponentInstance) -> ComponentInstance:
        if not component.is_bound:
            return component

        try:
            logger.debug(f"Re-executing query {component.queryId} for component {component.id}")
            rows = await self.client.execute_query(app_id, component.queryId)
            return component.model_copy(update={"data": rows})
        except Exception as e:
            detail = e.detail if isinstance(e, HTTPException) else str(e)
            logger.error(f"Error re-executing query {component.queryId} for component {component.id}: {detail}")
            return component.model_copy(update={"data": None})

    async def save_layout(self, app_id: str, components: List[ComponentInstance]) -> List[Dict[str, Any]]:
        layout = strip_data(components)
        logger.info(f"Saving layout for app {app_id} with {len(layout)} components")
        await self.client.put_layout(app_id, layout)
        return layout

    async def list_queries(self, app_id: str) -> List[QueryMeta]:
        return await self.client.list_queries(app_id)

    async def bind_query(self, app_id: str, components: List[ComponentInstance], component_id: str,
                         query_id: str, queries: Optional[List[QueryMeta]] = None) -> List[ComponentInstance]:
        """Execute a query and attach it to one component.

        Returns a new list on success. Any failure raises and leaves the
        given components exactly as they were.
        """
        index = find_component_index(components, component_id)

        logger.info(f"Binding query {query_id} to component {component_id} in app {app_id}")
        rows = await self.client.execute_query(app_id, query_id)

        if queries is None:
            try:
                queries = await self.client.list_queries(app_id)
            except HTTPException as e:
                logger.warning(f"Could not look up query name for {query_id}: {e.detail}")
                queries = []

        query_name = next((query.name for query in queries if query.id == query_id), None)

        updated = list(components)
        updated[index] = components[index].model_copy(update={
            "queryId": query_id,
            "queryName": query_name,
            "data": rows
        })
        return updated
