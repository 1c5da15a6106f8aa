# tests/conftest.py
import json
import random
import re
import httpx
import pytest
from models.layout import ComponentInstance, ComponentType
from models.session import SessionContext
from services.backend_client import BackendClient
from services.layouts import LayoutService

BACKEND_URL = "http://backend.test/api"
APP_ID = "app-1"

def ok(data):
    return httpx.Response(200, json={"success": True, "data": data})

def failure(status_code, error):
    return httpx.Response(status_code, json={"success": False, "error": error})

class FakeBackend:
    """In-memory stand-in for the application backend's /apps endpoints"""

    def __init__(self):
        self.app = {"id": APP_ID, "name": "Sales Overview", "description": "Quarterly sales"}
        self.layout = []
        self.queries = {}
        self.failing = set()
        self.executed = []
        self.saved = []
        self.fail_layout = False
        self.fail_save = False

    def add_query(self, query_id, name, rows):
        self.queries[query_id] = (name, rows)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path[len("/api"):]
        method = request.method

        if method == "GET" and path == f"/apps/{APP_ID}":
            return ok(self.app)

        if path == f"/apps/{APP_ID}/layout":
            if method == "GET":
                if self.fail_layout:
                    return failure(500, "database unavailable")
                return ok({"layout": self.layout})
            if method == "PUT":
                if self.fail_save:
                    return failure(500, "write rejected")
                layout = json.loads(request.content)["layout"]
                self.saved.append(layout)
                self.layout = layout
                return ok({"layout": layout})

        if method == "GET" and path == f"/apps/{APP_ID}/queries":
            return ok([
                {"id": query_id, "name": name, "queryType": "sql", "dataSource": {"name": "warehouse", "type": "postgres"}}
                for query_id, (name, _) in self.queries.items()
            ])

        match = re.fullmatch(rf"/apps/{APP_ID}/queries/([^/]+)/execute", path)
        if method == "POST" and match:
            query_id = match.group(1)
            self.executed.append(query_id)
            if query_id in self.failing:
                return httpx.Response(200, json={"success": False, "error": "syntax error near SELECT"})
            if query_id not in self.queries:
                return failure(404, "Query not found")
            rows = self.queries[query_id][1]
            return ok({"data": rows, "rowCount": len(rows), "executionTime": 3})

        return failure(404, "Not found")

@pytest.fixture
def session():
    return SessionContext(access_token="access-1", refresh_token="refresh-1")

@pytest.fixture
def rng():
    return random.Random(7)

@pytest.fixture
def backend():
    return FakeBackend()

@pytest.fixture
def client(backend, session):
    return BackendClient(session, base_url=BACKEND_URL, transport=httpx.MockTransport(backend))

@pytest.fixture
def layout_service(session, client):
    return LayoutService(session, client)

@pytest.fixture
def make_component():
    counter = {"next": 0}

    def factory(component_type, data=None, query_id=None, **fields):
        counter["next"] += 1
        return ComponentInstance(
            id=fields.pop("id", f"component-{counter['next']}"),
            type=ComponentType(component_type),
            queryId=query_id,
            data=data,
            **fields
        )

    return factory
