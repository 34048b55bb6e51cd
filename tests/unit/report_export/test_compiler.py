"""
Tests for the tree compiler
"""
import pytest

from report_export.compiler import TreeCompiler, check_bindings, find_roots, splice_children
from report_export.models import PageState, RuntimeComponentConfig, WidgetTree
from report_export.renderers import RendererRegistry
from report_export.renderers.text import TextRenderer


class ExplodingTextRenderer(TextRenderer):
    def render_html(self, widget_id, props):
        raise RuntimeError("renderer exploded")


def compile_tree(nodes, data=None):
    return TreeCompiler().compile(WidgetTree.from_payload(nodes), data)


def codes(compiled):
    return [diagnostic.code for diagnostic in compiled.diagnostics]


class TestFindRoots:
    def test_roots_in_map_order(self):
        tree = WidgetTree.from_payload(
            {
                "b": {"type": "Text"},
                "a": {"type": "Container", "nodes": ["c"]},
                "c": {"type": "Text"},
            }
        )
        assert [node.id for node in find_roots(tree.nodes)] == ["b", "a"]

    def test_full_cycle_has_no_roots(self):
        tree = WidgetTree.from_payload({"a": {"nodes": ["b"]}, "b": {"nodes": ["a"]}})
        assert find_roots(tree.nodes) == []


class TestSplice:
    def test_children_inserted_before_final_close(self):
        assert splice_children("<div><div></div></div>", "<p>x</p>") == "<div><div></div>\n<p>x</p>\n</div>"


class TestTreeCompiler:
    """Test compiling widget trees into markup"""

    def test_single_text(self):
        compiled = compile_tree({"t": {"type": "Text", "props": {"text": "Hello"}}})
        assert compiled.html.startswith('<div id="t" data-component="text"')
        assert compiled.html.endswith(">Hello</div>")
        assert compiled.widget_count == 1
        assert compiled.components == []
        assert compiled.diagnostics == []

    def test_children_nest_in_order(self):
        compiled = compile_tree(
            {
                "ROOT": {"type": {"resolvedName": "Page"}, "nodes": ["one", "two"]},
                "one": {"type": "Text", "props": {"text": "first"}},
                "two": {"type": "Text", "props": {"text": "second"}},
            }
        )
        html = compiled.html
        assert html.index('id="ROOT"') < html.index(">first<") < html.index(">second<")
        assert html.endswith("</div>\n</div>")
        assert compiled.widget_count == 3

    def test_hidden_widget_is_skipped(self):
        compiled = compile_tree({"t": {"type": "Text", "props": {"visible": False}}})
        assert compiled.html == ""
        assert compiled.widget_count == 0

    def test_unknown_type_degrades(self):
        compiled = compile_tree({"x": {"type": "FooWidget", "props": {"size": 3}}})
        assert compiled.html == "<!-- Unknown component type: FooWidget -->"
        assert compiled.components == [RuntimeComponentConfig(id="x", type="FooWidget", props={"size": 3})]
        assert codes(compiled) == ["UNKNOWN_WIDGET_TYPE"]

    def test_empty_tree(self):
        compiled = compile_tree({})
        assert compiled.html == ""
        assert codes(compiled) == ["EMPTY_TREE"]

    def test_no_roots_is_an_error(self):
        compiled = compile_tree({"a": {"type": "Container", "nodes": ["b"]}, "b": {"type": "Container", "nodes": ["a"]}})
        assert compiled.html == ""
        assert codes(compiled) == ["NO_ROOTS"]
        assert compiled.diagnostics[0].level.value == "error"

    def test_cycle_below_root_is_cut(self):
        compiled = compile_tree(
            {
                "root": {"type": "Container", "nodes": ["a"]},
                "a": {"type": "Container", "nodes": ["b"]},
                "b": {"type": "Container", "nodes": ["a"]},
            }
        )
        assert compiled.widget_count == 3
        assert codes(compiled) == ["CYCLE_DETECTED"]

    def test_missing_child(self):
        compiled = compile_tree({"root": {"type": "Container", "nodes": ["ghost"]}})
        assert codes(compiled) == ["MISSING_CHILD"]
        assert compiled.widget_count == 1

    def test_children_of_leaf_are_ignored(self):
        compiled = compile_tree({"t": {"type": "Text", "nodes": ["u"]}, "u": {"type": "Text", "props": {"text": "lost"}}})
        assert "lost" not in compiled.html
        assert codes(compiled) == ["CHILDREN_IGNORED"]

    def test_invalid_condition_is_reported(self):
        compiled = compile_tree({"t": {"type": "Text", "props": {"visibilityCondition": "data.a >"}}})
        assert codes(compiled) == ["INVALID_CONDITION"]
        assert compiled.widget_count == 1

    @pytest.mark.parametrize("condition", [True, 0, 12.5, ["data.a"]])
    def test_non_string_condition_is_reported(self, condition):
        nodes = {"t": {"type": "Text", "props": {"text": "x", "visibilityCondition": condition}}}
        for data in (None, {"a": 1}):
            compiled = compile_tree(nodes, data)
            assert ">x</div>" in compiled.html
            assert "data-visibility-condition" not in compiled.html
            assert codes(compiled) == ["INVALID_CONDITION"]
            assert "must be a string" in compiled.diagnostics[0].message

    def test_render_failure_is_contained(self):
        registry = RendererRegistry()
        registry.register(ExplodingTextRenderer())
        tree = WidgetTree.from_payload(
            {
                "root": {"type": "Container", "nodes": ["boom", "ok"]},
                "boom": {"type": "Text"},
                "ok": {"type": "Divider"},
            }
        )
        compiled = TreeCompiler(registry).compile(tree)
        assert "<!-- Failed to render component: boom -->" in compiled.html
        assert 'id="ok"' in compiled.html
        assert codes(compiled) == ["RENDER_FAILED"]

    def test_components_in_document_order(self):
        compiled = compile_tree(
            {
                "root": {"type": "Page", "nodes": ["a", "b"]},
                "a": {"type": "Text", "props": {"binding": "data.a"}},
                "b": {"type": "Gauge", "props": {"binding": "data.b"}},
            }
        )
        assert [(c.id, c.type) for c in compiled.components] == [("a", "text"), ("b", "gauge")]


class TestPreviewBinding:
    """Test baking sample data into static markup"""

    def test_unbound_tree_is_unchanged_by_data(self):
        nodes = {
            "root": {"type": "Container", "nodes": ["t", "d"]},
            "t": {"type": "Text", "props": {"text": "Static"}},
            "d": {"type": "Divider"},
        }
        assert compile_tree(nodes).html == compile_tree(nodes, {"anything": 1}).html

    def test_bound_text_is_filled(self, sample_tree, sample_data):
        compiled = compile_tree(sample_tree, sample_data)
        assert ">72</div>" in compiled.html
        assert ">Report for Acme Labs</div>" in compiled.html
        assert 'data-status="pass"' in compiled.html
        assert ">84%</span>" in compiled.html
        assert ">Slow images</li>" in compiled.html
        assert ">LCP</td>" in compiled.html

    def test_runtime_config_keeps_original_props(self, sample_tree, sample_data):
        compiled = compile_tree(sample_tree, sample_data)
        temp = next(c for c in compiled.components if c.id == "temp")
        title = next(c for c in compiled.components if c.id == "title")
        assert temp.props["text"] == "Edit this text"
        assert title.props["text"] == "Report for {{data.client.name}}"

    def test_chart_config_uses_bound_series(self, sample_tree, sample_data):
        compiled = compile_tree(sample_tree, sample_data)
        chart = next(c for c in compiled.components if c.id == "chart")
        assert chart.props["datasets"][0]["data"] == [12, 19, 3]
        assert chart.props["bindings"]["primaryBinding"] == "data.series"

    def test_false_condition_hides_but_keeps_widget(self):
        nodes = {"t": {"type": "Text", "props": {"binding": "data.label", "visibilityCondition": "data.failed"}}}
        compiled = compile_tree(nodes, {"failed": False, "label": "Alert"})
        assert 'data-condition-hidden="true"' in compiled.html
        assert ">Alert</div>" in compiled.html
        assert compiled.widget_count == 1
        assert compiled.components == [
            RuntimeComponentConfig(
                id="t",
                type="text",
                props={
                    "text": "Edit this text",
                    "binding": "data.label",
                    "visibilityCondition": "data.failed",
                },
            )
        ]

    def test_true_condition_is_not_marked(self):
        nodes = {"t": {"type": "Text", "props": {"text": "Alert", "visibilityCondition": "data.failed"}}}
        assert "data-condition-hidden" not in compile_tree(nodes, {"failed": True}).html
        assert "data-condition-hidden" not in compile_tree(nodes).html


class TestCompilePages:
    def test_pages_in_order(self):
        pages = [
            PageState(id="p2", order=2, canvas_state={"b": {"type": "Text", "props": {"text": "second"}}}),
            PageState(
                id="p1",
                order=1,
                canvas_state={"a": {"type": "Text", "props": {"text": "first"}}},
                settings={"background": "#eeeeee"},
            ),
        ]
        compiled = TreeCompiler().compile_pages(pages)
        html = compiled.html
        assert html.index(">first<") < html.index(">second<")
        assert html.count('class="page-break"') == 1
        assert '<div class="report-page" data-page="1" style="background: #eeeeee;">' in html
        assert compiled.widget_count == 2

    def test_single_page_has_no_break(self):
        compiled = TreeCompiler().compile_pages([PageState(id="p", canvas_state={"a": {"type": "Spacer"}})])
        assert "page-break" not in compiled.html


class TestCheckBindings:
    @pytest.mark.parametrize(
        "props,unresolved",
        [
            ({"binding": "data.a"}, []),
            ({"binding": "data.nope"}, ["data.nope"]),
            ({"text": "{{data.a}} {{data.b}}"}, ["data.b"]),
            ({"bindings": {"primaryBinding": "data.x", "datasets": [{"binding": "data.a"}]}}, ["data.x"]),
        ],
    )
    def test_unresolved_paths(self, props, unresolved):
        config = RuntimeComponentConfig(id="w", type="text", props=props)
        diagnostics = check_bindings([config], {"a": 1})
        assert [d.code for d in diagnostics] == ["UNRESOLVED_BINDING"] * len(unresolved)
        for diagnostic, path in zip(diagnostics, unresolved):
            assert path in diagnostic.message
