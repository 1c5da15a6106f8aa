# services/component_registry.py
"""
Per-type data shaping for layout components.

Every component type registers one shaper here. A shaper turns a component
and its query rows into a typed visual (models.visual); the live renderer and
the static export both start from that visual, so row limits, fallbacks and
label rules live in exactly one place.
"""
import random
from typing import Any, Callable, Dict, List, Optional

from models.layout import ComponentInstance, ComponentType, DEFAULT_TEXT_CONTENT
from models.visual import (
    ButtonVisual, CardEntry, CardVisual, ComponentTypeInfo, FormField, FormVisual,
    GaugeVisual, ListItem, ListVisual, MetricVisual, Placeholder, ProgressVisual,
    ScatterPoint, ScatterVisual, SeriesPoint, SeriesVisual, TableVisual, TextVisual, Visual
)
from services.encoding import (
    Row, cell, cell_text, clamp_percent, display_label, format_number, humanize,
    infer_encoding, is_nan, js_string, series_value, to_fixed, to_number, usable_rows
)

PALETTE = ['#3b82f6', '#8b5cf6', '#ec4899', '#f59e0b', '#10b981', '#06b6d4', '#6366f1', '#f43f5e']
GAUGE_TRACK_COLOR = '#e5e7eb'
NO_QUERY_MESSAGE = "No query bound - select a query from sidebar"

TABLE_ROW_LIMIT = 10
BAR_ROW_LIMIT = 10
LINE_ROW_LIMIT = 20
SLICE_ROW_LIMIT = 8
RADAR_ROW_LIMIT = 8
RADAR_LABEL_LENGTH = 15
SCATTER_ROW_LIMIT = 50
LIST_ROW_LIMIT = 10
FORM_FIELD_LIMIT = 5

Shaper = Callable[[ComponentInstance, Optional[List[Row]], Any], Visual]

class ComponentSpec:
    def __init__(self, component_type: ComponentType, title: str, category: str, shaper: Shaper,
                 requires_data: bool = True, row_limit: Optional[int] = None,
                 color: Optional[str] = None, empty_message: str = "No data"):
        self.type = component_type
        self.title = title
        self.category = category
        self.shaper = shaper
        self.requires_data = requires_data
        self.row_limit = row_limit
        self.color = color
        self.empty_message = empty_message

    def info(self) -> ComponentTypeInfo:
        default_config = {"content": DEFAULT_TEXT_CONTENT} if self.type == ComponentType.TEXT else {}
        return ComponentTypeInfo(
            type=self.type.value,
            title=self.title,
            category=self.category,
            requires_data=self.requires_data,
            row_limit=self.row_limit,
            default_config=default_config
        )

_REGISTRY: Dict[ComponentType, ComponentSpec] = {}

def register(component_type: ComponentType, title: str, category: str, **options):
    def decorator(shaper: Shaper) -> Shaper:
        _REGISTRY[component_type] = ComponentSpec(component_type, title, category, shaper, **options)
        return shaper
    return decorator

def get_spec(component_type: ComponentType) -> ComponentSpec:
    try:
        return _REGISTRY[ComponentType(component_type)]
    except (KeyError, ValueError):
        raise KeyError(f"No shaper registered for component type '{component_type}'")

def catalog() -> List[ComponentTypeInfo]:
    """Registered component types in palette order"""
    return [_REGISTRY[component_type].info() for component_type in ComponentType if component_type in _REGISTRY]

def placeholder_for(component: ComponentInstance, spec: ComponentSpec) -> Placeholder:
    if not component.is_bound and component.data is None:
        return Placeholder(message=NO_QUERY_MESSAGE, unbound=True)
    return Placeholder(message=spec.empty_message)

def shape_component(component: ComponentInstance, rng: Any = None) -> Visual:
    """Derive the visual for one component from its type, config and data.

    Data-driven types without usable rows get their placeholder; text, button
    and form always render from config.
    """
    spec = get_spec(component.type)
    rows = usable_rows(component.data)
    if spec.requires_data and rows is None:
        return placeholder_for(component, spec)
    return spec.shaper(component, rows, rng if rng is not None else random)

def _series(component: ComponentInstance, rows: List[Row], chart: str, limit: int,
            palette: bool = False, label_length: Optional[int] = None) -> SeriesVisual:
    encoding = infer_encoding(rows)
    value_column = encoding.numericColumns[0] if encoding.numericColumns else None
    spec = get_spec(component.type)

    points = []
    for index, row in enumerate(rows[:limit]):
        label = display_label(cell(row, encoding.labelColumn))
        if label_length is not None:
            label = label[:label_length]
        value = series_value(cell(row, value_column)) if value_column is not None else 1
        points.append(SeriesPoint(
            label=label,
            value=value,
            color=PALETTE[index % len(PALETTE)] if palette else None
        ))

    return SeriesVisual(
        chart=chart,
        series_name=value_column if value_column is not None else "Value",
        label_column=encoding.labelColumn,
        value_column=value_column,
        color=spec.color,
        points=points
    )

def _first_metric(rows: List[Row]):
    """Column and numeric value of the first numeric cell in rows[0]"""
    encoding = infer_encoding(rows)
    if not encoding.numericColumns:
        return None, None
    column = encoding.numericColumns[0]
    return column, to_number(rows[0][column])

#
# Data display
#
@register(ComponentType.TABLE, "Data Table", "data", row_limit=TABLE_ROW_LIMIT,
          empty_message="No data available")
def shape_table(component, rows, rng):
    columns = list(rows[0].keys())
    body = [[cell_text(row, column) for column in columns] for row in rows[:TABLE_ROW_LIMIT]]
    footer = None
    if len(rows) > TABLE_ROW_LIMIT:
        footer = f"Showing {TABLE_ROW_LIMIT} of {len(rows)} rows"
    return TableVisual(columns=columns, rows=body, total_rows=len(rows), footer=footer)

@register(ComponentType.LIST, "List", "data", row_limit=LIST_ROW_LIMIT)
def shape_list(component, rows, rng):
    columns = list(rows[0].keys())
    display_column = columns[1] if len(columns) > 1 else columns[0]
    items = [
        ListItem(index=index + 1, value=cell_text(row, display_column))
        for index, row in enumerate(rows[:LIST_ROW_LIMIT])
    ]
    return ListVisual(
        title=humanize(display_column),
        display_column=display_column,
        items=items,
        total=len(rows)
    )

@register(ComponentType.CARD, "Data Card", "data", row_limit=1)
def shape_card(component, rows, rng):
    entries = [CardEntry(key=key, value=js_string(value)) for key, value in rows[0].items()]
    return CardVisual(entries=entries)

#
# Charts
#
@register(ComponentType.CHART, "Bar Chart", "charts", row_limit=BAR_ROW_LIMIT,
          color='#3b82f6', empty_message="No data for chart")
def shape_bar_chart(component, rows, rng):
    return _series(component, rows, "bar", BAR_ROW_LIMIT)

@register(ComponentType.LINE_CHART, "Line Chart", "charts", row_limit=LINE_ROW_LIMIT,
          color='#8b5cf6', empty_message="No data for line chart")
def shape_line_chart(component, rows, rng):
    return _series(component, rows, "line", LINE_ROW_LIMIT)

@register(ComponentType.AREA_CHART, "Area Chart", "charts", row_limit=LINE_ROW_LIMIT,
          color='#10b981', empty_message="No data for area chart")
def shape_area_chart(component, rows, rng):
    return _series(component, rows, "area", LINE_ROW_LIMIT)

@register(ComponentType.PIE_CHART, "Pie Chart", "charts", row_limit=SLICE_ROW_LIMIT,
          color=PALETTE[0], empty_message="No data for pie chart")
def shape_pie_chart(component, rows, rng):
    return _series(component, rows, "pie", SLICE_ROW_LIMIT, palette=True)

@register(ComponentType.DONUT_CHART, "Donut Chart", "charts", row_limit=SLICE_ROW_LIMIT,
          color=PALETTE[0], empty_message="No data for donut chart")
def shape_donut_chart(component, rows, rng):
    return _series(component, rows, "donut", SLICE_ROW_LIMIT, palette=True)

@register(ComponentType.RADAR_CHART, "Radar Chart", "charts", row_limit=RADAR_ROW_LIMIT,
          color='#f59e0b', empty_message="No data for radar chart")
def shape_radar_chart(component, rows, rng):
    return _series(component, rows, "radar", RADAR_ROW_LIMIT, label_length=RADAR_LABEL_LENGTH)

@register(ComponentType.GAUGE, "Gauge", "charts", row_limit=1,
          color='#3b82f6', empty_message="No data for gauge")
def shape_gauge(component, rows, rng):
    column, value = _first_metric(rows)
    percentage = clamp_percent(value if column is not None else 50)
    return GaugeVisual(
        value=percentage,
        remaining=100 - percentage,
        label=humanize(column) if column is not None else "Value",
        display=f"{to_fixed(percentage, 0)}%",
        color=get_spec(ComponentType.GAUGE).color,
        track_color=GAUGE_TRACK_COLOR
    )

@register(ComponentType.SCATTER_CHART, "Scatter Chart", "charts", row_limit=SCATTER_ROW_LIMIT,
          color='#ec4899', empty_message="No data for scatter chart")
def shape_scatter_chart(component, rows, rng):
    numeric_columns = infer_encoding(rows).numericColumns
    x_column = numeric_columns[0] if len(numeric_columns) > 0 else None
    y_column = numeric_columns[1] if len(numeric_columns) > 1 else None

    # missing axes are filled with uniform noise in [0, 100)
    points = []
    for row in rows[:SCATTER_ROW_LIMIT]:
        x = series_value(cell(row, x_column)) if x_column is not None else rng.random() * 100
        y = series_value(cell(row, y_column)) if y_column is not None else rng.random() * 100
        points.append(ScatterPoint(x=x, y=y))

    return ScatterVisual(
        x_label=x_column if x_column is not None else "X",
        y_label=y_column if y_column is not None else "Y",
        x_fallback=x_column is None,
        y_fallback=y_column is None,
        color=get_spec(ComponentType.SCATTER_CHART).color,
        points=points
    )

#
# Metrics
#
def _metric(rows: List[Row], variant: str, default_label: str, with_trend: bool = False) -> MetricVisual:
    column, value = _first_metric(rows)
    if column is None:
        value = len(rows)
    if is_nan(value):
        value = None

    metric = MetricVisual(
        variant=variant,
        value=value,
        display_value=format_number(value) if value is not None else "N/A",
        label=humanize(column) if column is not None else default_label
    )

    if with_trend:
        trend = _trend(rows, column)
        if trend is not None:
            metric.trend = trend
            metric.trend_display = f"{to_fixed(abs(trend), 1)}%"
            metric.trend_direction = "up" if trend >= 0 else "down"
            metric.trend_available = True

    return metric

def _trend(rows: List[Row], column: Optional[str]) -> Optional[float]:
    """Percent change from rows[1] to rows[0]; None when it can't be computed"""
    if column is None or len(rows) < 2:
        return None
    if not isinstance(rows[1], dict) or column not in rows[1]:
        return None

    current = to_number(rows[0][column])
    previous = to_number(rows[1][column])
    if is_nan(current) or is_nan(previous) or previous == 0:
        return None
    return (current - previous) / previous * 100

@register(ComponentType.METRIC_CARD, "Metric Card", "metrics", row_limit=2,
          empty_message="No data for metric card")
def shape_metric_card(component, rows, rng):
    return _metric(rows, "metricCard", "Total", with_trend=True)

@register(ComponentType.KPI, "KPI", "metrics", row_limit=1)
def shape_kpi(component, rows, rng):
    return _metric(rows, "kpi", "Count")

@register(ComponentType.STAT, "Statistic", "metrics", row_limit=1)
def shape_stat(component, rows, rng):
    return _metric(rows, "stat", "Total Records")

@register(ComponentType.PROGRESS, "Progress", "metrics", row_limit=1)
def shape_progress(component, rows, rng):
    column, value = _first_metric(rows)
    percentage = clamp_percent(value if column is not None else 0)

    if percentage >= 75:
        band = "green"
    elif percentage >= 50:
        band = "blue"
    elif percentage >= 25:
        band = "yellow"
    else:
        band = "red"

    return ProgressVisual(
        value=percentage,
        display=f"{to_fixed(percentage, 1)}%",
        label=humanize(column) if column is not None else "Progress",
        band=band
    )

#
# Content and inputs
#
@register(ComponentType.TEXT, "Text", "content", requires_data=False)
def shape_text(component, rows, rng):
    content = component.config.get("content") or DEFAULT_TEXT_CONTENT
    return TextVisual(content=content if isinstance(content, str) else js_string(content))

@register(ComponentType.FORM, "Form", "content", requires_data=False, row_limit=1)
def shape_form(component, rows, rng):
    if rows is None:
        return FormVisual(fields=[
            FormField(name="name", label="Name", placeholder="Enter name"),
            FormField(name="email", label="Email", placeholder="Enter email", input_type="email"),
        ])

    fields = [
        FormField(name=key, label=humanize(key), placeholder=f"Enter {key}")
        for key in list(rows[0].keys())[:FORM_FIELD_LIMIT]
    ]
    return FormVisual(fields=fields, from_data=True)

@register(ComponentType.BUTTON, "Button", "content", requires_data=False)
def shape_button(component, rows, rng):
    label = component.config.get("text") or component.config.get("label") or "Click Me"
    return ButtonVisual(label=label if isinstance(label, str) else js_string(label))
