# services/live_renderer.py
"""
Payloads for the interactive dashboard client.

Each component is shaped through the component registry and then given the
props its Recharts element needs. Builder selection comes from BuilderState.
"""
from typing import Any, Dict, List, Optional
from models.layout import ComponentInstance
from models.session import BuilderState
from models.visual import GaugeVisual, RenderedComponent, ScatterVisual, SeriesVisual, Visual
from services.component_registry import get_spec, shape_component

CHART_HEIGHT = 300

def _series_props(visual: SeriesVisual) -> Dict[str, Any]:
    if visual.chart == "radar":
        data = [{"subject": point.label, "value": point.value} for point in visual.points]
    else:
        data = [{"name": point.label, "value": point.value} for point in visual.points]

    props: Dict[str, Any] = {"height": CHART_HEIGHT, "data": data, "dataKey": "value", "name": visual.series_name}

    if visual.chart == "bar":
        props.update({"component": "BarChart", "fill": visual.color})
    elif visual.chart == "line":
        props.update({"component": "LineChart", "type": "monotone", "stroke": visual.color, "strokeWidth": 2})
    elif visual.chart == "area":
        props.update({"component": "AreaChart", "type": "monotone", "stroke": visual.color,
                      "fill": visual.color, "fillOpacity": 0.6})
    elif visual.chart in ("pie", "donut"):
        props.update({
            "component": "PieChart",
            "nameKey": "name",
            "outerRadius": 100,
            "innerRadius": 60 if visual.chart == "donut" else 0,
            "cells": [point.color for point in visual.points]
        })
    elif visual.chart == "radar":
        props.update({"component": "RadarChart", "angleKey": "subject", "stroke": visual.color,
                      "fill": visual.color, "fillOpacity": 0.6})
    return props

def _gauge_props(visual: GaugeVisual) -> Dict[str, Any]:
    return {
        "component": "PieChart",
        "height": CHART_HEIGHT,
        "data": [
            {"name": "Value", "value": visual.value},
            {"name": "Remaining", "value": visual.remaining}
        ],
        "dataKey": "value",
        "startAngle": 180,
        "endAngle": 0,
        "innerRadius": 80,
        "outerRadius": 120,
        "cells": [visual.color, visual.track_color],
        "centerLabel": visual.display,
        "caption": visual.label
    }

def _scatter_props(visual: ScatterVisual) -> Dict[str, Any]:
    return {
        "component": "ScatterChart",
        "height": CHART_HEIGHT,
        "name": "Data Points",
        "data": [{"x": point.x, "y": point.y} for point in visual.points],
        "xName": visual.x_label,
        "yName": visual.y_label,
        "fill": visual.color
    }

def chart_props(visual: Visual) -> Optional[Dict[str, Any]]:
    if isinstance(visual, SeriesVisual):
        return _series_props(visual)
    if isinstance(visual, GaugeVisual):
        return _gauge_props(visual)
    if isinstance(visual, ScatterVisual):
        return _scatter_props(visual)
    return None

def render_component(component: ComponentInstance, state: Optional[BuilderState] = None,
                     rng: Any = None) -> RenderedComponent:
    visual = shape_component(component, rng=rng)
    return RenderedComponent(
        id=component.id,
        type=component.type.value,
        title=get_spec(component.type).title,
        queryId=component.queryId,
        queryName=component.queryName,
        selected=state is not None and state.selectedComponent == component.id,
        visual=visual,
        chart=chart_props(visual)
    )

def render_layout(components: List[ComponentInstance], state: Optional[BuilderState] = None,
                  rng: Any = None) -> List[RenderedComponent]:
    return [render_component(component, state=state, rng=rng) for component in components]
