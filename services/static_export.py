# services/static_export.py
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from jinja2 import Environment, FileSystemLoader, select_autoescape
from models.layout import AppMeta, ComponentInstance
from models.visual import GaugeVisual, Placeholder, ScatterVisual, SeriesVisual, Visual
from services.component_registry import get_spec, shape_component
import config
import logging

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "export-templates"

# visual kind -> fragment template
FRAGMENT_TEMPLATES = {
    "table": "components/table.html",
    "series": "components/chart.html",
    "gauge": "components/chart.html",
    "scatter": "components/chart.html",
    "metric": "components/metric.html",
    "progress": "components/progress.html",
    "list": "components/list.html",
    "card": "components/card.html",
    "text": "components/text.html",
    "form": "components/form.html",
    "button": "components/button.html",
}

GRID_COLOR = "rgba(0,0,0,0.05)"

def _with_alpha(hex_color: str, alpha: float) -> str:
    hex_color = hex_color.lstrip("#")
    red, green, blue = (int(hex_color[i:i + 2], 16) for i in (0, 2, 4))
    return f"rgba({red},{green},{blue},{alpha})"

def _series_config(visual: SeriesVisual) -> Dict[str, Any]:
    labels = [point.label for point in visual.points]
    values = [point.value for point in visual.points]

    if visual.chart in ("pie", "donut"):
        return {
            "type": "doughnut" if visual.chart == "donut" else "pie",
            "data": {
                "labels": labels,
                "datasets": [{"data": values, "backgroundColor": [point.color for point in visual.points]}]
            },
            "options": {
                "responsive": True,
                "maintainAspectRatio": False,
                "plugins": {"legend": {"position": "right"}}
            }
        }

    if visual.chart == "radar":
        return {
            "type": "radar",
            "data": {
                "labels": labels,
                "datasets": [{
                    "label": visual.series_name,
                    "data": values,
                    "borderColor": visual.color,
                    "backgroundColor": _with_alpha(visual.color, 0.2),
                    "pointBackgroundColor": visual.color,
                    "pointBorderColor": "#fff"
                }]
            },
            "options": {
                "responsive": True,
                "maintainAspectRatio": False,
                "plugins": {"legend": {"position": "top"}},
                "scales": {"r": {"beginAtZero": True, "grid": {"color": GRID_COLOR}}}
            }
        }

    dataset: Dict[str, Any] = {"label": visual.series_name, "data": values, "borderColor": visual.color}
    if visual.chart == "bar":
        dataset.update({"backgroundColor": _with_alpha(visual.color, 0.8), "borderWidth": 1})
    elif visual.chart == "line":
        dataset.update({"backgroundColor": _with_alpha(visual.color, 0.1), "tension": 0.4, "fill": False})
    else:
        dataset.update({"backgroundColor": _with_alpha(visual.color, 0.3), "tension": 0.4, "fill": True})

    return {
        "type": "bar" if visual.chart == "bar" else "line",
        "data": {"labels": labels, "datasets": [dataset]},
        "options": {
            "responsive": True,
            "maintainAspectRatio": False,
            "plugins": {"legend": {"display": visual.chart != "bar", "position": "top"}},
            "scales": {
                "y": {"beginAtZero": True, "grid": {"color": GRID_COLOR}},
                "x": {"grid": {"display": False}}
            }
        }
    }

def _gauge_config(visual: GaugeVisual) -> Dict[str, Any]:
    return {
        "type": "doughnut",
        "data": {
            "labels": ["Value", "Remaining"],
            "datasets": [{
                "data": [visual.value, visual.remaining],
                "backgroundColor": [visual.color, visual.track_color],
                "borderWidth": 0
            }]
        },
        "options": {
            "responsive": True,
            "maintainAspectRatio": False,
            "rotation": -90,
            "circumference": 180,
            "cutout": "75%",
            "plugins": {"legend": {"display": False}, "tooltip": {"enabled": False}}
        }
    }

def _scatter_config(visual: ScatterVisual) -> Dict[str, Any]:
    return {
        "type": "scatter",
        "data": {
            "datasets": [{
                "label": "Data Points",
                "data": [{"x": point.x, "y": point.y} for point in visual.points],
                "backgroundColor": _with_alpha(visual.color, 0.6),
                "borderColor": visual.color,
                "pointRadius": 5
            }]
        },
        "options": {
            "responsive": True,
            "maintainAspectRatio": False,
            "plugins": {"legend": {"display": True}},
            "scales": {
                "x": {"type": "linear", "position": "bottom", "title": {"display": True, "text": visual.x_label},
                      "grid": {"color": GRID_COLOR}},
                "y": {"title": {"display": True, "text": visual.y_label}, "grid": {"color": GRID_COLOR}}
            }
        }
    }

def chart_config(visual: Visual) -> Optional[Dict[str, Any]]:
    """Chart.js configuration for chart-bearing visuals, None otherwise"""
    if isinstance(visual, SeriesVisual):
        return _series_config(visual)
    if isinstance(visual, GaugeVisual):
        return _gauge_config(visual)
    if isinstance(visual, ScatterVisual):
        return _scatter_config(visual)
    return None

class StaticExportGenerator:
    """Builds a standalone HTML report of a layout.

    The document carries its own CSS and one inline script that initialises
    every chart with Chart.js; nothing refers back to the application.
    """

    def __init__(self, template_dir: Optional[Path] = None):
        self.env = Environment(
            loader=FileSystemLoader(template_dir or TEMPLATE_DIR),
            autoescape=select_autoescape(['html', 'xml'])
        )

    def render_fragment(self, index: int, component: ComponentInstance,
                        rng: Any = None) -> Tuple[str, Optional[Dict[str, Any]]]:
        """HTML fragment and optional chart init entry for one component.

        Components whose visual is a placeholder contribute nothing.
        """
        visual = shape_component(component, rng=rng)
        if isinstance(visual, Placeholder):
            return "", None

        canvas_id = f"chart-{index}"
        fragment = self.env.get_template(FRAGMENT_TEMPLATES[visual.kind]).render(
            title=get_spec(component.type).title,
            visual=visual,
            canvas_id=canvas_id
        )

        config_payload = chart_config(visual)
        chart = {"canvas_id": canvas_id, "config": config_payload} if config_payload else None
        return fragment, chart

    def generate_html(self, components: List[ComponentInstance], app_meta: Optional[AppMeta] = None,
                      generated_at: Optional[datetime] = None, rng: Any = None) -> str:
        app_meta = app_meta or AppMeta()
        generated_at = generated_at or datetime.now()

        fragments = []
        charts = []
        for index, component in enumerate(components):
            try:
                fragment, chart = self.render_fragment(index, component, rng=rng)
            except Exception as e:
                logger.error(f"Error exporting component {component.id} ({component.type.value}): {str(e)}")
                # One broken component must not take the report down
                continue

            if fragment:
                fragments.append(fragment)
            if chart:
                charts.append(chart)

        logger.info(f"Exported {len(fragments)} of {len(components)} components with {len(charts)} charts")

        return self.env.get_template("base.html").render(
            app_name=app_meta.name or "Dashboard",
            app_description=app_meta.description or "Analytics Dashboard",
            generated_on=generated_at.strftime("%B %d, %Y, %I:%M %p"),
            component_count=len(components),
            fragments=fragments,
            charts=charts,
            chartjs_url=config.CHARTJS_CDN_URL,
            brand_name=config.EXPORT_BRAND_NAME,
            year=generated_at.year
        )

def export_static_html(components: List[ComponentInstance], app_meta: Optional[AppMeta] = None,
                       generated_at: Optional[datetime] = None, rng: Any = None) -> str:
    return StaticExportGenerator().generate_html(components, app_meta, generated_at=generated_at, rng=rng)
