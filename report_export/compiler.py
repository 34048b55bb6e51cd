"""
Tree compiler

Walks the widget forest depth-first and concatenates renderer output.
Containers are rendered as empty shells first; their compiled children are
spliced in just before the shell's final closing tag. Problems with the tree
never abort compilation: they are recorded as diagnostics and the offending
widget is skipped or degraded.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Set

from core.logging import get_logger
from report_export.binders import bind_props
from report_export.binding import extract_bindings, has_binding, resolve_path
from report_export.conditions import validate_condition
from report_export.models import (
    Diagnostic,
    DiagnosticLevel,
    PageState,
    RuntimeComponentConfig,
    WidgetNode,
    WidgetTree,
)
from report_export.renderers import RendererRegistry, escape_html, renderer_registry

logger = get_logger(__name__, domain="report_export")

_CLOSING_DIV = re.compile(r"</div>\s*$")


@dataclass
class CompiledTree:
    """Body markup plus runtime configs collected in document order"""

    html: str
    components: List[RuntimeComponentConfig] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    widget_count: int = 0


@dataclass
class _CompileState:
    tree: WidgetTree
    data: Any = None
    components: List[RuntimeComponentConfig] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    visited: Set[str] = field(default_factory=set)
    widget_count: int = 0

    def report(self, level: DiagnosticLevel, code: str, message: str, widget_id: Optional[str] = None) -> None:
        self.diagnostics.append(Diagnostic(level=level, code=code, message=message, widget_id=widget_id))
        log = logger.error if level == DiagnosticLevel.ERROR else logger.warning
        log(message, extra={"code": code, "widget_id": widget_id})


def find_roots(nodes: Mapping[str, WidgetNode]) -> List[WidgetNode]:
    """Widgets referenced by no other widget's ``children``, in map order"""
    child_ids = {child_id for node in nodes.values() for child_id in node.children}
    return [node for key, node in nodes.items() if key not in child_ids and node.id not in child_ids]


def splice_children(container_html: str, child_html: str) -> str:
    """Insert ``child_html`` before the container's final ``</div>``"""
    return _CLOSING_DIV.sub(lambda _: f"\n{child_html}\n</div>", container_html, count=1)


class TreeCompiler:
    """Compiles widget trees into body markup and runtime configs"""

    def __init__(self, registry: Optional[RendererRegistry] = None):
        self.registry = registry or renderer_registry

    def compile(self, tree: WidgetTree, data: Any = None) -> CompiledTree:
        """Compile ``tree``; when ``data`` is given, bound values are baked into the markup"""
        state = _CompileState(tree=tree, data=data)
        html = self._compile_forest(state)
        return CompiledTree(
            html=html,
            components=state.components,
            diagnostics=state.diagnostics,
            widget_count=state.widget_count,
        )

    def compile_pages(self, pages: Iterable[PageState], data: Any = None) -> CompiledTree:
        """Compile pages in ``order``, each wrapped in a ``report-page`` element"""
        ordered = sorted(pages, key=lambda page: page.order)
        parts: List[str] = []
        components: List[RuntimeComponentConfig] = []
        diagnostics: List[Diagnostic] = []
        widget_count = 0

        for index, page in enumerate(ordered):
            compiled = self.compile(page.canvas_state, data)
            page_break = '<div class="page-break"></div>' if index < len(ordered) - 1 else ""
            parts.append(
                f'<div class="report-page" data-page="{index + 1}" '
                f'style="background: {escape_html(page.settings.background)};">{compiled.html}</div>{page_break}'
            )
            components.extend(compiled.components)
            diagnostics.extend(compiled.diagnostics)
            widget_count += compiled.widget_count

        return CompiledTree(
            html="\n".join(parts),
            components=components,
            diagnostics=diagnostics,
            widget_count=widget_count,
        )

    def _compile_forest(self, state: _CompileState) -> str:
        nodes = state.tree.nodes
        if not nodes:
            state.report(DiagnosticLevel.WARNING, "EMPTY_TREE", "Template has no widgets")
            return ""

        roots = find_roots(nodes)
        if not roots:
            state.report(
                DiagnosticLevel.ERROR,
                "NO_ROOTS",
                "Every widget is a child of another widget; the tree has no root",
            )
            return ""

        return "\n".join(self._compile_node(node, state) for node in roots)

    def _compile_node(self, node: WidgetNode, state: _CompileState) -> str:
        if node.id in state.visited:
            state.report(
                DiagnosticLevel.ERROR,
                "CYCLE_DETECTED",
                f"Widget {node.id} is reachable more than once; skipping repeat",
                node.id,
            )
            return ""
        state.visited.add(node.id)

        renderer = self.registry.get(node.type)
        if renderer is None:
            state.report(
                DiagnosticLevel.WARNING,
                "UNKNOWN_WIDGET_TYPE",
                f"Unknown component type: {node.type}",
                node.id,
            )
            state.components.append(RuntimeComponentConfig(id=node.id, type=node.type, props=node.props))
            return f"<!-- Unknown component type: {escape_html(node.type)} -->"

        try:
            condition = node.props.get("visibilityCondition")
            if condition is not None:
                valid, error = validate_condition(condition)
                if not valid:
                    state.report(
                        DiagnosticLevel.WARNING,
                        "INVALID_CONDITION",
                        f"Visibility condition on {node.id} cannot be parsed ({error}); widget stays visible",
                        node.id,
                    )

            if state.data is None:
                result = renderer.render(node.id, node.props)
                config = result.component_config
            else:
                bound = bind_props(renderer.widget_type, node.props, state.data)
                result = renderer.render(node.id, bound)
                config = result.component_config
                if not renderer.config_from_bound_props:
                    config = renderer.config_for(node.id, node.props)
        except Exception as exc:
            logger.error(f"Renderer for {node.type} failed on {node.id}: {exc}", exc_info=True)
            state.report(DiagnosticLevel.ERROR, "RENDER_FAILED", f"Failed to render {node.id}: {exc}", node.id)
            return f"<!-- Failed to render component: {escape_html(node.id)} -->"

        if not result.html:
            return ""
        state.widget_count += 1
        if config is not None:
            state.components.append(config)

        if not node.children:
            return result.html
        if not renderer.is_container:
            state.report(
                DiagnosticLevel.WARNING,
                "CHILDREN_IGNORED",
                f"{node.type} widget {node.id} cannot hold children; {len(node.children)} ignored",
                node.id,
            )
            return result.html

        child_parts = []
        for child_id in node.children:
            child = state.tree.get(child_id)
            if child is None:
                state.report(
                    DiagnosticLevel.WARNING,
                    "MISSING_CHILD",
                    f"Widget {node.id} references missing child {child_id}",
                    node.id,
                )
                continue
            child_parts.append(self._compile_node(child, state))
        return splice_children(result.html, "\n".join(child_parts))


def _config_paths(config: RuntimeComponentConfig) -> List[str]:
    props = config.props
    paths = []
    if props.get("binding"):
        paths.append(str(props["binding"]).strip())
    if has_binding(props.get("text")):
        paths.extend(extract_bindings(props["text"]))
    bindings = props.get("bindings")
    if isinstance(bindings, dict):
        if bindings.get("primaryBinding"):
            paths.append(bindings["primaryBinding"])
        if bindings.get("title"):
            paths.extend(extract_bindings(bindings["title"]))
        paths.extend(dataset["binding"] for dataset in bindings.get("datasets", []) if dataset.get("binding"))
    return paths


def check_bindings(components: Iterable[RuntimeComponentConfig], data: Any) -> List[Diagnostic]:
    """Warn about binding paths that do not resolve against ``data``"""
    diagnostics = []
    for config in components:
        for path in _config_paths(config):
            if resolve_path(path, data) is None:
                diagnostics.append(
                    Diagnostic(
                        level=DiagnosticLevel.WARNING,
                        code="UNRESOLVED_BINDING",
                        message=f"Binding {path} on {config.id} does not resolve against the sample data",
                        widget_id=config.id,
                    )
                )
    return diagnostics
