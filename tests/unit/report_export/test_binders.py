"""
Tests for compile-time binders
"""
from report_export.binders import bind_chart, bind_props, chart_series
from report_export.renderers.base import CONDITION_HIDDEN, WidgetType


class TestBindProps:
    """Test per-kind data binding of widget props"""

    def test_props_are_not_mutated(self):
        props = {"binding": "data.value", "text": "old"}
        bound = bind_props(WidgetType.TEXT, props, {"value": 3})
        assert bound["text"] == "3"
        assert props["text"] == "old"

    def test_unresolved_binding_keeps_props(self):
        props = {"binding": "data.missing", "text": "fallback"}
        assert bind_props(WidgetType.TEXT, props, {"a": 1}) == props

    def test_text_interpolation(self):
        bound = bind_props(WidgetType.TEXT, {"text": "Hi {{data.name}}"}, {"name": "Ada"})
        assert bound["text"] == "Hi Ada"

    def test_no_data_is_identity(self):
        props = {"binding": "data.a"}
        assert bind_props(WidgetType.TEXT, props, None) is props

    def test_false_condition_marks_widget_hidden(self):
        props = {"visibilityCondition": "data.status === 'FAIL'"}
        assert bind_props(WidgetType.DIVIDER, props, {"status": "PASS"})[CONDITION_HIDDEN] is True
        assert CONDITION_HIDDEN not in bind_props(WidgetType.DIVIDER, props, {"status": "FAIL"})

    def test_hidden_widget_is_still_bound(self):
        props = {"binding": "data.value", "visibilityCondition": "data.failed"}
        bound = bind_props(WidgetType.TEXT, props, {"value": 7, "failed": False})
        assert bound["text"] == "7"
        assert bound[CONDITION_HIDDEN] is True

    def test_non_string_condition_is_ignored(self):
        props = {"text": "x", "visibilityCondition": True}
        assert CONDITION_HIDDEN not in bind_props(WidgetType.TEXT, props, {"a": 1})

    def test_indicator_status(self):
        bound = bind_props(WidgetType.INDICATOR, {"binding": "data.ok"}, {"ok": True})
        assert bound["status"] == "pass"

    def test_numeric_widgets(self):
        assert bind_props(WidgetType.GAUGE, {"binding": "data.v"}, {"v": "42"})["value"] == 42
        assert "value" not in bind_props(WidgetType.PROGRESS_BAR, {"binding": "data.v"}, {"v": "n/a"})

    def test_table_rows(self):
        rows = [{"a": 1}]
        assert bind_props(WidgetType.TABLE, {"binding": "data.rows"}, {"rows": rows})["data"] == rows
        assert "data" not in bind_props(WidgetType.TABLE, {"binding": "data.rows"}, {"rows": "nope"})

    def test_bullet_list_items(self):
        bound = bind_props(WidgetType.BULLET_LIST, {"binding": "data.items"}, {"items": ["a", 2]})
        assert bound["items"] == ["a", "2"]

    def test_datetime_value(self):
        bound = bind_props(WidgetType.DATE_TIME, {"binding": "data.when"}, {"when": "2024-01-15"})
        assert bound["value"] == "2024-01-15"

    def test_unbound_kinds_pass_through(self):
        props = {"src": "a.png"}
        assert bind_props(WidgetType.IMAGE, props, {"a": 1}) is props


class TestChartBinding:
    def test_series_shapes(self):
        assert chart_series([1, 2]) == {"data": [1, 2], "labels": None}
        assert chart_series([{"label": "a", "value": 1}]) == {"data": [1], "labels": ["a"]}
        assert chart_series({"data": [3], "labels": ["x"]}) == {"data": [3], "labels": ["x"]}
        assert chart_series([]) is None
        assert chart_series("text") is None

    def test_primary_binding(self):
        bound = bind_chart({"binding": "data.series"}, {"series": [{"label": "Q1", "value": 5}]})
        assert bound["dataPoints"] == "5"
        assert bound["labels"] == ["Q1"]

    def test_dataset_bindings(self):
        props = {"datasets": [{"binding": "data.a"}, {"dataPoints": "1, 2"}], "title": "{{data.t}}"}
        bound = bind_chart(props, {"a": [7, 8], "t": "Totals"})
        assert bound["datasets"][0]["dataPoints"] == "7, 8"
        assert bound["datasets"][1] == {"dataPoints": "1, 2"}
        assert bound["title"] == "Totals"
