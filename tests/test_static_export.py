# tests/test_static_export.py
from datetime import datetime
import pytest
from models.layout import AppMeta
from models.visual import GaugeVisual, ScatterPoint, ScatterVisual, SeriesPoint, SeriesVisual
import services.static_export as static_export
from services.static_export import StaticExportGenerator, chart_config, export_static_html

REGIONS = [{"region": "West", "sales": 120}, {"region": "East", "sales": 95}]
GENERATED_AT = datetime(2024, 3, 5, 14, 30)
APP = AppMeta(id="app-1", name="Sales Overview", description="Quarterly sales")

@pytest.fixture
def generator():
    return StaticExportGenerator()

def test_document_header_and_footer(generator, make_component):
    html = generator.generate_html(
        [make_component("text", config={"content": "Hello"}), make_component("button")],
        APP,
        generated_at=GENERATED_AT
    )

    assert html.startswith("<!DOCTYPE html>")
    assert "<title>Sales Overview - Dashboard Preview</title>" in html
    assert "Quarterly sales" in html
    assert "March 05, 2024, 02:30 PM" in html
    assert "2 Interactive Components" in html
    assert "&copy; 2024 DashForge" in html
    assert "chart.umd.min.js" in html

def test_default_header_without_app_meta(generator):
    html = generator.generate_html([], generated_at=GENERATED_AT)

    assert "<h1>Dashboard</h1>" in html
    assert "Analytics Dashboard" in html
    assert "0 Interactive Components" in html

def test_one_chart_initialiser_per_chart_component(generator, make_component, rng):
    layout = [
        make_component("chart", data=REGIONS, query_id="q1"),
        make_component("table", data=REGIONS, query_id="q1"),
        make_component("gauge", data=[{"score": 40}], query_id="q1"),
        make_component("scatterChart", data=[{"a": 1, "b": 2}], query_id="q1"),
        make_component("kpi", data=[{"orders": 3}], query_id="q1"),
    ]

    html = generator.generate_html(layout, APP, generated_at=GENERATED_AT, rng=rng)

    assert html.count("new Chart(") == 3
    assert 'id="chart-0"' in html
    assert 'id="chart-2"' in html
    assert 'id="chart-3"' in html
    assert html.count('class="component ') == 5

def test_placeholders_are_left_out(generator, make_component):
    layout = [make_component("chart"), make_component("table", data=[], query_id="q1"), make_component("text")]

    html = generator.generate_html(layout, APP, generated_at=GENERATED_AT)

    assert html.count('class="component ') == 1
    assert "new Chart(" not in html
    assert "No query bound" not in html

def test_failing_component_is_skipped(generator, make_component, monkeypatch):
    real_shape = static_export.shape_component

    def flaky_shape(component, rng=None):
        if component.id == "broken":
            raise RuntimeError("bad row")
        return real_shape(component, rng=rng)

    monkeypatch.setattr(static_export, "shape_component", flaky_shape)
    layout = [
        make_component("text", config={"content": "Before"}),
        make_component("chart", data=REGIONS, query_id="q1", id="broken"),
        make_component("text", config={"content": "After"}),
    ]

    html = generator.generate_html(layout, APP, generated_at=GENERATED_AT)

    assert "Before" in html
    assert "After" in html
    assert "new Chart(" not in html
    assert "3 Interactive Components" in html

def test_user_content_is_escaped(generator, make_component):
    hostile = "</script><script>alert(1)</script>"
    layout = [
        make_component("pieChart", data=[{"label": hostile, "n": 1}], query_id="q1"),
        make_component("table", data=[{"name": "<b>bold</b>"}], query_id="q1"),
        make_component("text", config={"content": "<img src=x onerror=alert(1)>"}),
    ]

    html = generator.generate_html(layout, AppMeta(name="<Ops & Co>"), generated_at=GENERATED_AT)

    assert "<script>alert(1)" not in html
    assert html.count("<script") == 2
    assert "&lt;b&gt;bold&lt;/b&gt;" in html
    assert "<img src=x" not in html
    assert "&lt;Ops &amp; Co&gt;" in html

def test_metric_card_without_trend(generator, make_component):
    html = generator.generate_html(
        [make_component("metricCard", data=[{"revenue": 10}], query_id="q1")],
        APP,
        generated_at=GENERATED_AT
    )
    assert "Not enough data for a trend" in html

def test_metric_card_with_trend(generator, make_component):
    rows = [{"revenue": 150}, {"revenue": 100}]
    html = generator.generate_html([make_component("metricCard", data=rows, query_id="q1")], APP,
                                   generated_at=GENERATED_AT)
    assert "50.0%" in html
    assert "trend up" in html

def test_export_static_html_shortcut(make_component):
    html = export_static_html([make_component("button", config={"text": "Go"})], APP, generated_at=GENERATED_AT)
    assert ">Go</button>" in html

#
# Chart.js configuration
#
def series(chart, color="#3b82f6"):
    return SeriesVisual(
        chart=chart,
        series_name="sales",
        label_column="region",
        value_column="sales",
        color=color,
        points=[SeriesPoint(label="West", value=120, color="#3b82f6"), SeriesPoint(label="East", value=None)]
    )

def test_bar_config():
    config = chart_config(series("bar"))

    assert config["type"] == "bar"
    assert config["data"]["labels"] == ["West", "East"]
    assert config["data"]["datasets"][0]["data"] == [120, None]
    assert config["options"]["maintainAspectRatio"] is False

def test_line_and_area_configs():
    line = chart_config(series("line"))["data"]["datasets"][0]
    area = chart_config(series("area"))["data"]["datasets"][0]

    assert line["tension"] == 0.4
    assert line["fill"] is False
    assert area["fill"] is True

@pytest.mark.parametrize("chart, chart_type", [("pie", "pie"), ("donut", "doughnut")])
def test_slice_configs(chart, chart_type):
    assert chart_config(series(chart))["type"] == chart_type

def test_radar_config():
    config = chart_config(series("radar", color="#f59e0b"))

    assert config["type"] == "radar"
    assert config["options"]["scales"]["r"]["beginAtZero"] is True
    assert config["data"]["datasets"][0]["backgroundColor"] == "rgba(245,158,11,0.2)"

def test_gauge_config():
    visual = GaugeVisual(value=40, remaining=60, label="score", display="40%", color="#3b82f6", track_color="#e5e7eb")
    config = chart_config(visual)

    assert config["type"] == "doughnut"
    assert config["data"]["datasets"][0]["data"] == [40, 60]
    assert config["options"]["rotation"] == -90
    assert config["options"]["circumference"] == 180
    assert config["options"]["cutout"] == "75%"

def test_scatter_config():
    visual = ScatterVisual(x_label="height", y_label="Y", y_fallback=True, color="#ec4899",
                           points=[ScatterPoint(x=1, y=2)])
    config = chart_config(visual)

    assert config["type"] == "scatter"
    assert config["data"]["datasets"][0]["label"] == "Data Points"
    assert config["data"]["datasets"][0]["pointRadius"] == 5
    assert config["options"]["scales"]["x"]["type"] == "linear"
