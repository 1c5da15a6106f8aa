# models/layout.py
from enum import Enum
from typing import Optional, Dict, Any, List
from uuid import uuid4
from pydantic import BaseModel, ConfigDict, Field
from models.session import BuilderState

class ComponentType(str, Enum):
    TABLE = "table"
    CHART = "chart"
    LINE_CHART = "lineChart"
    PIE_CHART = "pieChart"
    AREA_CHART = "areaChart"
    DONUT_CHART = "donutChart"
    GAUGE = "gauge"
    SCATTER_CHART = "scatterChart"
    RADAR_CHART = "radarChart"
    METRIC_CARD = "metricCard"
    CARD = "card"
    STAT = "stat"
    KPI = "kpi"
    PROGRESS = "progress"
    LIST = "list"
    TEXT = "text"
    FORM = "form"
    BUTTON = "button"

DEFAULT_TEXT_CONTENT = "Edit this text..."

def new_component_id() -> str:
    return f"component-{uuid4().hex}"

class ComponentInstance(BaseModel):
    # unknown persisted keys survive a load/save round trip
    model_config = ConfigDict(extra="allow", use_enum_values=False)

    id: str
    type: ComponentType
    queryId: Optional[str] = None
    queryName: Optional[str] = None
    config: Dict[str, Any] = Field(default_factory=dict)
    # query rows as received; anything other than a non-empty list of rows renders a placeholder
    data: Optional[Any] = None

    @classmethod
    def create(cls, component_type: ComponentType) -> "ComponentInstance":
        """Build a fresh, unbound component with the type's default config"""
        config = {"content": DEFAULT_TEXT_CONTENT} if component_type == ComponentType.TEXT else {}
        return cls(id=new_component_id(), type=component_type, config=config)

    @property
    def is_bound(self) -> bool:
        return self.queryId is not None

    def persisted(self) -> Dict[str, Any]:
        """Serialized form sent to the backend; query results are never stored"""
        return self.model_dump(mode="json", exclude={"data"})

class DataSourceMeta(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None

class QueryMeta(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    queryType: Optional[str] = None
    dataSource: Optional[DataSourceMeta] = None

class AppMeta(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None

class LayoutSaveRequest(BaseModel):
    layout: List[ComponentInstance] = Field(default_factory=list)

class AddComponentRequest(BaseModel):
    layout: List[ComponentInstance] = Field(default_factory=list)
    type: ComponentType

class BindQueryRequest(BaseModel):
    layout: List[ComponentInstance] = Field(default_factory=list)
    componentId: str
    queryId: str

class LayoutResponse(BaseModel):
    layout: List[ComponentInstance]

class RenderRequest(BaseModel):
    layout: List[ComponentInstance] = Field(default_factory=list)
    state: Optional[BuilderState] = None

class ExportRequest(BaseModel):
    layout: List[ComponentInstance] = Field(default_factory=list)
    app: Optional[AppMeta] = None
