import logging
import os
from dataclasses import replace
from typing import List, Optional

from rich.markup import escape
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Footer, Header, Input, Label, LoadingIndicator, Markdown, Tree

from ramo.__version__ import __version__
from ramo.core.config import RamoConfig
from ramo.core.errors import ParseError
from ramo.core.export import dump_forest
from ramo.core.model import DependencyKind, DependencyNode, FilterOptions, VersionConstraintMode, walk_forest
from ramo.core.query import filter_forest, summarize
from ramo.core.state import NodeStateStore
from ramo.managers import load_manifest

KIND_CYCLE = [None, *DependencyKind]
MODE_CYCLE = list(VersionConstraintMode)


def configure_logging(config: RamoConfig) -> None:
    logging.basicConfig(
        filename=config.log_file,
        level=getattr(logging, config.log_level, logging.DEBUG),
        filemode="w",
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def _next(cycle: list, current):
    return cycle[(cycle.index(current) + 1) % len(cycle)]


def highlight_match(name: str, search_text: str) -> str:
    """Escaped markup for `name` with the first search hit in reverse video."""
    if not search_text.strip():
        return escape(name)

    start = name.lower().find(search_text.lower())
    if start < 0:
        return escape(name)

    end = start + len(search_text)
    return f"{escape(name[:start])}[reverse]{escape(name[start:end])}[/reverse]{escape(name[end:])}"


class PackageScreen(ModalScreen):
    """Modal with the metadata of one package."""

    DEFAULT_CSS = """
    PackageScreen {
        align: center middle;
        background: rgba(0, 0, 0, 0.8);
    }
    #dialog {
        padding: 0 1;
        width: 85%;
        height: 85%;
        border: heavy $primary;
        background: $surface;
        layout: vertical;
    }
    #title {
        text-align: center;
        text-style: bold;
        background: $primary;
        color: white;
        width: 100%;
        padding: 1;
    }
    #content-scroll {
        height: 1fr;
        margin: 1 0;
        overflow-y: auto;
        scrollbar-gutter: stable;
    }
    #close-btn {
        width: 100%;
        dock: bottom;
    }
    """

    def __init__(self, node: DependencyNode) -> None:
        super().__init__()
        self.node = node

    def compose(self) -> ComposeResult:
        yield Vertical(
            Label(f"{escape(self.node.name)} {escape(self.node.version)}", id="title"),
            VerticalScroll(
                Markdown(self._build_report()),
                id="content-scroll"
            ),
            Button("Close (Esc)", variant="primary", id="close-btn"),
            id="dialog",
        )

    def _build_report(self) -> str:
        node = self.node
        md_output = [
            f"# {node.name}\n",
            f"- **Version**: `{node.version}`",
            f"- **Type**: {node.kind.value}",
            f"- **License**: {node.license or '_unknown_'}",
        ]
        if node.has_upgrade:
            md_output.append(f"- **Latest**: `{node.latest_version}`")
        if node.repository_url:
            md_output.append(f"- **Repository**: [{node.repository_url}]({node.repository_url})")
        if node.homepage:
            md_output.append(f"- **Homepage**: [{node.homepage}]({node.homepage})")
        if node.children:
            md_output.append(f"- **Sub-dependencies**: {len(node.children)}")

        if node.vulnerabilities:
            md_output.append("\n## Vulnerabilities\n")
            for vuln in node.vulnerabilities:
                line = f"- **{vuln.severity.value.upper()}** {vuln.title}"
                if vuln.url:
                    line += f" ([link]({vuln.url}))"
                md_output.append(line)

        return "\n".join(md_output)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss()

    def key_escape(self) -> None:
        self.dismiss()


class RamoApp(App):
    TITLE = "Ramo"
    SUB_TITLE = f"v{__version__}"

    DEFAULT_CSS = """
    Screen { layout: vertical; }

    #info-bar {
        height: 3;
        dock: top;
        background: $surface;
        border-bottom: solid $primary;
        align: left middle;
        padding: 0 1;
    }

    .info-label {
        width: auto;
        height: 1;
        padding: 0 2;
        color: $text;
    }

    #search { margin: 0 1; }

    #tree-container {
        height: 1fr;
        border: none;
        margin: 0 1;
    }
    Tree { padding: 1; background: $surface; }

    #loading-container { height: 100%; align: center middle; }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("slash", "focus_search", "Search"),
        Binding("escape", "focus_tree", "Tree", show=False),
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
        Binding("l", "expand_node", "Expand"),
        Binding("h", "collapse_node", "Collapse"),
        Binding("e", "expand_all", "Expand all"),
        Binding("c", "collapse_all", "Collapse all"),
        Binding("v", "toggle_vulnerable", "Vuln Only"),
        Binding("o", "toggle_outdated", "Outdated"),
        Binding("t", "cycle_kind", "Type"),
        Binding("L", "cycle_license", "License", show=False),
        Binding("r", "cycle_version_mode", "Versions"),
        Binding("0", "clear_filters", "Clear filters"),
        Binding("x", "export", "Export"),
    ]

    def __init__(self, manifest_path: str, config: Optional[RamoConfig] = None) -> None:
        super().__init__()
        self.manifest_path = manifest_path
        self.config = config or RamoConfig()
        self.forest: List[DependencyNode] = []
        self.state = NodeStateStore()
        self.search_text = ""
        self.options = FilterOptions()
        self.parser_name = "..."

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        with Horizontal(id="info-bar"):
            yield Label(f"[b]Context:[/b] [cyan]{self.parser_name}[/]", id="lbl-context", classes="info-label")
            yield Label("[b]Total:[/b] [blue]0[/]", id="lbl-total", classes="info-label")
            yield Label("[b]Prod:[/b] 0", id="lbl-prod", classes="info-label")
            yield Label("[b]Dev:[/b] 0", id="lbl-dev", classes="info-label")
            yield Label("[b]Peer:[/b] 0", id="lbl-peer", classes="info-label")
            yield Label("[b]Vuln:[/b] [red]0[/]", id="lbl-vuln", classes="info-label")
            yield Label("", id="lbl-filter", classes="info-label")

        yield Input(placeholder="Search dependencies... (/)", id="search")

        with Container(id="main-area"):
            with Container(id="loading-container"):
                yield LoadingIndicator()
                yield Label("Initializing Ramo...", id="status-label")

            with Container(id="tree-container"):
                yield Tree("Root", id="dep-tree")

        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#tree-container").display = False
        self.load_project()

    # --- ACTIONS ---

    def action_focus_search(self) -> None:
        self.query_one("#search", Input).focus()

    def action_focus_tree(self) -> None:
        self.query_one("#dep-tree").focus()

    def action_cursor_down(self) -> None:
        self.query_one("#dep-tree").action_cursor_down()

    def action_cursor_up(self) -> None:
        self.query_one("#dep-tree").action_cursor_up()

    def action_expand_node(self) -> None:
        tree = self.query_one("#dep-tree")
        if tree.cursor_node:
            tree.cursor_node.expand()

    def action_collapse_node(self) -> None:
        tree = self.query_one("#dep-tree")
        node = tree.cursor_node
        if node:
            if node.is_expanded:
                node.collapse()
            elif node.parent:
                tree.select_node(node.parent)
                node.parent.collapse()

    def action_expand_all(self) -> None:
        self.state.expand_all(self.forest)
        self.render_tree()

    def action_collapse_all(self) -> None:
        self.state.collapse_all(self.forest)
        self.render_tree()

    def action_toggle_vulnerable(self) -> None:
        self.set_options(show_with_vulnerabilities_only=not self.options.show_with_vulnerabilities_only)

    def action_toggle_outdated(self) -> None:
        self.set_options(show_outdated_only=not self.options.show_outdated_only)

    def action_cycle_kind(self) -> None:
        current = next(iter(self.options.dependency_kinds), None)
        kind = _next(KIND_CYCLE, current)
        self.set_options(dependency_kinds=frozenset() if kind is None else frozenset({kind}))

    def action_cycle_license(self) -> None:
        licenses = sorted({node.license for node in walk_forest(self.forest) if node.license})
        cycle = [None, *licenses]
        current = next(iter(self.options.license_types), None)
        license_id = _next(cycle, current) if current in cycle else None
        self.set_options(license_types=frozenset() if license_id is None else frozenset({license_id}))

    def action_clear_filters(self) -> None:
        self.options = FilterOptions()
        self.notify("Filters cleared.", severity="information")
        self.render_tree()

    def action_cycle_version_mode(self) -> None:
        self.set_options(version_constraint_mode=_next(MODE_CYCLE, self.options.version_constraint_mode))

    def action_export(self) -> None:
        if not self.forest:
            self.notify("Nothing to export.", severity="warning")
            return

        target = f"{os.path.basename(self.manifest_path)}_export.json"
        with open(target, "w", encoding="utf-8") as f:
            dump_forest(self.forest, f)

        logging.info(f"Exported {len(self.forest)} dependencies to {target}")
        self.notify(f"Exported to {target}", severity="information")

    # --- EVENTS ---

    def on_input_changed(self, event: Input.Changed) -> None:
        self.search_text = event.value
        if self.forest:
            self.render_tree()

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        node_data = event.node.data
        if node_data is not None:
            self.push_screen(PackageScreen(node_data))

    def on_tree_node_expanded(self, event: Tree.NodeExpanded) -> None:
        self._sync_expand(event.node, True)

    def on_tree_node_collapsed(self, event: Tree.NodeCollapsed) -> None:
        self._sync_expand(event.node, False)

    def _sync_expand(self, tree_node, value: bool) -> None:
        node_data = tree_node.data
        if node_data is None or (self.state.is_expanded(node_data) == value and node_data.is_expanded == value):
            return

        self.state.set_expanded(self.forest, node_data, value)

        # Nodes sharing (name, version) follow the toggled one
        def sync(parent):
            for child in parent.children:
                if child is not tree_node and child.data is not None and child.data.key == node_data.key:
                    if value and not child.is_expanded:
                        child.expand()
                    elif not value and child.is_expanded:
                        child.collapse()
                sync(child)

        sync(self.query_one("#dep-tree", Tree).root)

    # --- LOGIC ---

    def set_options(self, **changes) -> None:
        self.options = replace(self.options, **changes)
        self.notify(f"Filters: {self.describe_filters()}", severity="information")
        self.render_tree()

    def describe_filters(self) -> str:
        parts = []
        if self.options.dependency_kinds:
            parts.append("type=" + ",".join(sorted(k.value for k in self.options.dependency_kinds)))
        if self.options.license_types:
            parts.append("license=" + ",".join(sorted(self.options.license_types)))
        if self.options.version_constraint_mode != VersionConstraintMode.ALL:
            parts.append(f"versions={self.options.version_constraint_mode.value}")
        if self.options.show_outdated_only:
            parts.append("outdated")
        if self.options.show_with_vulnerabilities_only:
            parts.append("vulnerable")
        return " ".join(parts) or "none"

    def update_status(self, msg: str) -> None:
        self.query_one("#status-label", Label).update(msg)

    def update_dashboard_ui(self) -> None:
        stats = summarize(self.forest)
        self.query_one("#lbl-context", Label).update(f"[b]Context:[/b] [cyan]{escape(self.parser_name)}[/]")
        self.query_one("#lbl-total", Label).update(f"[b]Total:[/b] [blue]{stats.total}[/]")
        self.query_one("#lbl-prod", Label).update(f"[b]Prod:[/b] {stats.production}")
        self.query_one("#lbl-dev", Label).update(f"[b]Dev:[/b] [yellow]{stats.development}[/]")
        self.query_one("#lbl-peer", Label).update(f"[b]Peer:[/b] [magenta]{stats.peer}[/]")
        self.query_one("#lbl-vuln", Label).update(f"[b]Vuln:[/b] [red]{stats.vulnerable}[/]")

    def show_error(self, message: str) -> None:
        self.query_one("#status-label", Label).update(f"[bold red]Fatal Error:[/]\n{escape(message)}")
        self.query_one("LoadingIndicator").display = False

    @work(thread=False)
    async def load_project(self) -> None:
        try:
            logging.info("Worker started.")
            self.update_status(f"Parsing {os.path.basename(self.manifest_path)}...")

            parser, forest = load_manifest(self.manifest_path, config=self.config)

            # A new load replaces the previous forest and its expand state
            self.forest = forest
            self.state.clear()
            self.parser_name = parser.name

            self.update_dashboard_ui()
            self.render_tree()
            self.query_one("#dep-tree").focus()

        except ParseError as e:
            logging.error(f"Parse error: {e.message}")
            self.show_error(e.message)
        except Exception as e:
            logging.exception("Fatal error in worker:")
            self.show_error(str(e))

    def render_label(self, node: DependencyNode) -> str:
        safe_name = highlight_match(node.name, self.search_text)
        safe_ver = escape(node.version)
        kind = f" [dim]{node.kind.value}[/]" if node.kind != DependencyKind.PRODUCTION else ""
        spdx = f" [dim]({escape(node.license)})[/]" if node.license else ""

        child_count = len(node.children)
        count_suffix = f" [dim]↳[/] {child_count}" if child_count > 0 else ""

        if node.vulnerabilities:
            severity = node.vulnerabilities[0].severity.value
            return f"[bold red](!) {safe_name}[/] [dim]{safe_ver}[/] [red]({severity})[/]{kind}{spdx}{count_suffix}"
        if node.version == "latest":
            return f"[blue](-) {safe_name}[/]{kind}{spdx}{count_suffix}"
        return f"[green](•) {safe_name} [dim]{safe_ver}[/]{kind}{spdx}{count_suffix}"

    def render_tree(self) -> None:
        visible = filter_forest(self.forest, self.search_text, self.options)

        tree = self.query_one("#dep-tree", Tree)
        tree.clear()
        tree.root.label = f"📂 {escape(os.path.basename(self.manifest_path))} [dim]({len(visible)}/{len(self.forest)})[/]"
        tree.root.expand()

        filtering = bool(self.search_text.strip()) or not self.options.is_default()

        def add_nodes(tree_node, nodes):
            for child in nodes:
                if child.is_leaf:
                    tree_node.add_leaf(self.render_label(child), data=child)
                    continue

                # Open the path down to matches while a query is active
                expand = filtering or self.state.is_expanded(child)
                new_node = tree_node.add(self.render_label(child), expand=expand, data=child)
                add_nodes(new_node, child.children)

        add_nodes(tree.root, visible)
        self.query_one("#lbl-filter", Label).update(f"[b]Filters:[/b] {escape(self.describe_filters())}")
        self.query_one("#loading-container").display = False
        self.query_one("#tree-container").display = True
