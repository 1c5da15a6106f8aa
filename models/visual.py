# models/visual.py
from typing import Optional, Dict, Any, List, Union, Literal
from pydantic import BaseModel, Field

Number = Union[int, float]

class Encoding(BaseModel):
    labelColumn: str
    numericColumns: List[str] = Field(default_factory=list)

class Placeholder(BaseModel):
    kind: Literal["placeholder"] = "placeholder"
    message: str
    unbound: bool = False

class TableVisual(BaseModel):
    kind: Literal["table"] = "table"
    columns: List[str]
    rows: List[List[str]]
    total_rows: int
    footer: Optional[str] = None

class SeriesPoint(BaseModel):
    label: str
    value: Optional[Number] = None
    color: Optional[str] = None

class SeriesVisual(BaseModel):
    """Single-series chart shared by bar, line, area, pie, donut and radar"""
    kind: Literal["series"] = "series"
    chart: str
    series_name: str
    label_column: str
    value_column: Optional[str] = None
    color: str
    points: List[SeriesPoint]

class GaugeVisual(BaseModel):
    kind: Literal["gauge"] = "gauge"
    value: Number
    remaining: Number
    label: str
    display: str
    color: str
    track_color: str

class ScatterPoint(BaseModel):
    x: Optional[Number] = None
    y: Optional[Number] = None

class ScatterVisual(BaseModel):
    kind: Literal["scatter"] = "scatter"
    x_label: str
    y_label: str
    x_fallback: bool = False
    y_fallback: bool = False
    color: str
    points: List[ScatterPoint]

class MetricVisual(BaseModel):
    kind: Literal["metric"] = "metric"
    variant: str
    value: Optional[Number] = None
    display_value: str
    label: str
    trend: Optional[Number] = None
    trend_display: Optional[str] = None
    trend_direction: Optional[Literal["up", "down"]] = None
    trend_available: bool = False

class ProgressVisual(BaseModel):
    kind: Literal["progress"] = "progress"
    value: Number
    display: str
    label: str
    band: Literal["green", "blue", "yellow", "red"]

class ListItem(BaseModel):
    index: int
    value: str

class ListVisual(BaseModel):
    kind: Literal["list"] = "list"
    title: str
    display_column: str
    items: List[ListItem]
    total: int

class CardEntry(BaseModel):
    key: str
    value: str

class CardVisual(BaseModel):
    kind: Literal["card"] = "card"
    entries: List[CardEntry]

class TextVisual(BaseModel):
    kind: Literal["text"] = "text"
    content: str

class FormField(BaseModel):
    name: str
    label: str
    placeholder: str
    input_type: str = "text"

class FormVisual(BaseModel):
    kind: Literal["form"] = "form"
    fields: List[FormField]
    submit_label: str = "Submit"
    from_data: bool = False

class ButtonVisual(BaseModel):
    kind: Literal["button"] = "button"
    label: str

Visual = Union[
    Placeholder,
    TableVisual,
    SeriesVisual,
    GaugeVisual,
    ScatterVisual,
    MetricVisual,
    ProgressVisual,
    ListVisual,
    CardVisual,
    TextVisual,
    FormVisual,
    ButtonVisual,
]

class RenderedComponent(BaseModel):
    id: str
    type: str
    title: str
    queryId: Optional[str] = None
    queryName: Optional[str] = None
    selected: bool = False
    visual: Visual = Field(discriminator="kind")
    chart: Optional[Dict[str, Any]] = None

class ComponentTypeInfo(BaseModel):
    type: str
    title: str
    category: str
    requires_data: bool
    row_limit: Optional[int] = None
    default_config: Dict[str, Any] = Field(default_factory=dict)
