from __future__ import annotations

import datetime as dt
import logging

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.message import Message
from textual.widget import Widget
from textual.widgets import DataTable, Footer, Header, RichLog, Static, TabbedContent, TabPane

from .commands import NavigationCommand
from .parse_portfolio import PortfolioValidationError, load_portfolio
from .portfolio_models import Portfolio, Role
from .timeline_session import TimelineSession

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "portfolio_timeline"
TAB_IDS = ("clients", "timeline", "users")

# level -> (prefix, style) for the log panel
LOG_LEVELS = {
    logging.DEBUG: ("·", "rgb(100,100,100)"),
    logging.INFO: ("ℹ", "rgb(0,255,255)"),
    logging.WARNING: ("⚠", "rgb(255,255,0)"),
    logging.ERROR: ("✗", "rgb(255,50,50)"),
}
ROLE_STYLES = {Role.ADMIN: "rgb(255,255,0)", Role.USER: "rgb(0,255,128)"}

HELP_TEXT = """\
Tab / Shift+Tab   switch tabs
j/k or ↓/↑        select next / previous
g / G             first / last row in a list
h/l or ←/→        scroll timeline
H/L               scroll fast
+ / -             zoom in / out
t                 centre on today
Home              jump to start
r                 reload snapshot
q                 quit"""


class RichLogHandler(logging.Handler):
    """Forwards log records into the dashboard's log panel."""

    def __init__(self, widget: RichLog) -> None:
        super().__init__()
        self._widget = widget

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
        except Exception:
            self.handleError(record)
            return
        level = max((lvl for lvl in LOG_LEVELS if lvl <= record.levelno), default=logging.DEBUG)
        prefix, style = LOG_LEVELS[level]
        self._widget.write(Text(f"{prefix} {message}", style=style))


class PortfolioTable(DataTable):
    """Row table with vim-style jumps to the first and last row."""

    BINDINGS = [
        Binding("g", "cursor_first", "First", show=False),
        Binding("G", "cursor_last", "Last", show=False),
    ]

    def action_cursor_first(self) -> None:
        if self.row_count:
            self.move_cursor(row=0)

    def action_cursor_last(self) -> None:
        if self.row_count:
            self.move_cursor(row=self.row_count - 1)


def format_refreshed(at: dt.datetime) -> str:
    return f"Refreshed {at:%H:%M:%S}"


class TimelineView(Widget, can_focus=True):
    """Draws the timeline session into whatever size the layout gives it."""

    BINDINGS = [
        Binding("left,h", "navigate('scroll_left')", "Scroll"),
        Binding("right,l", "navigate('scroll_right')", "Scroll", show=False),
        Binding("shift+left,H", "navigate('scroll_left_fast')", "Fast scroll", show=False),
        Binding("shift+right,L", "navigate('scroll_right_fast')", "Fast scroll", show=False),
        Binding("down,j", "navigate('select_next')", "Select"),
        Binding("up,k", "navigate('select_previous')", "Select", show=False),
        Binding("plus,equals_sign", "navigate('zoom_in')", "Zoom in"),
        Binding("minus", "navigate('zoom_out')", "Zoom out"),
        Binding("t", "navigate('center_on_today')", "Today"),
        Binding("home", "navigate('jump_to_start')", "Start", show=False),
    ]

    class Navigated(Message):
        """Posted after any navigation command so the status line can follow."""

    def __init__(self, session: TimelineSession, **kwargs) -> None:
        super().__init__(**kwargs)
        self.session = session

    def render(self) -> Text:
        grid, _ = self.session.draw(self.size.width, self.size.height)
        return grid.to_text()

    def on_resize(self, event: events.Resize) -> None:
        self.session.resize(event.size.width)

    def action_navigate(self, command: str) -> None:
        self.session.apply(NavigationCommand(command), self.size.width)
        self.refresh()
        self.post_message(self.Navigated())


class PortfolioDashboard(App):
    TITLE = "Portfolio Timeline"
    CSS = """
    TimelineView {
        height: 1fr;
    }
    #timeline-status {
        height: 1;
        background: $boost;
    }
    #log {
        height: 7;
        border: round $accent;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("question_mark", "help", "Help"),
        Binding("r", "reload", "Reload"),
        Binding("tab", "cycle_tab(1)", "Next tab", show=False, priority=True),
        Binding("shift+tab", "cycle_tab(-1)", "Previous tab", show=False, priority=True),
    ]

    def __init__(self, snapshot_path: str, session: TimelineSession, portfolio: Portfolio | None = None) -> None:
        super().__init__()
        self.snapshot_path = snapshot_path
        self.session = session
        self.portfolio = portfolio or Portfolio()
        self._log_handler: RichLogHandler | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with TabbedContent(initial="timeline"):
            with TabPane("Clients", id="clients"):
                yield PortfolioTable(id="clients-table", cursor_type="row", zebra_stripes=True)
            with TabPane("Timeline", id="timeline"):
                yield TimelineView(self.session, id="timeline-view")
                yield Static(id="timeline-status")
            with TabPane("Users", id="users"):
                yield PortfolioTable(id="users-table", cursor_type="row", zebra_stripes=True)
        yield RichLog(id="log", max_lines=100, markup=False)
        yield Footer()

    def on_mount(self) -> None:
        self._log_handler = RichLogHandler(self.query_one("#log", RichLog))
        self._log_handler.setFormatter(logging.Formatter("%(message)s"))
        logging.getLogger(PACKAGE_LOGGER).addHandler(self._log_handler)

        self.query_one("#clients-table", DataTable).add_columns("Name", "Address", "Projects")
        self.query_one("#users-table", DataTable).add_columns("Name", "Login", "Role")
        self._apply_portfolio(self.portfolio)
        self.query_one(TimelineView).focus()
        logger.info("Dashboard ready (%s)", self.snapshot_path)

    def on_unmount(self) -> None:
        if self._log_handler is not None:
            logging.getLogger(PACKAGE_LOGGER).removeHandler(self._log_handler)
            self._log_handler = None

    def on_timeline_view_navigated(self, message: TimelineView.Navigated) -> None:
        self._update_status()

    def on_tabbed_content_tab_activated(self, event: TabbedContent.TabActivated) -> None:
        self._focus_active_tab()

    def action_cycle_tab(self, step: int) -> None:
        tabs = self.query_one(TabbedContent)
        current = TAB_IDS.index(tabs.active) if tabs.active in TAB_IDS else 1
        tabs.active = TAB_IDS[(current + step) % len(TAB_IDS)]
        self._focus_active_tab()

    def action_help(self) -> None:
        self.notify(HELP_TEXT, title="Keyboard shortcuts", timeout=10)

    def action_reload(self) -> None:
        logger.info("Reloading %s", self.snapshot_path)
        try:
            portfolio = load_portfolio(self.snapshot_path)
        except (OSError, PortfolioValidationError) as exc:
            # Keep showing the previous snapshot.
            logger.error("Reload failed: %s", exc)
            self.notify(str(exc), title="Reload failed", severity="error")
            return
        self._apply_portfolio(portfolio)

    def _apply_portfolio(self, portfolio: Portfolio) -> None:
        self.portfolio = portfolio
        self.session.replace_intervals(portfolio.intervals())

        clients = self.query_one("#clients-table", DataTable)
        clients.clear()
        for client in portfolio.clients:
            clients.add_row(
                client.display_name,
                client.address or "-",
                Text(f"{client.projects_completed}/{client.projects_total}", style="rgb(0,255,128)"),
                key=client.id,
            )

        users = self.query_one("#users-table", DataTable)
        users.clear()
        for user in portfolio.users:
            users.add_row(
                user.display_name,
                user.login or "-",
                Text(str(user.role), style=ROLE_STYLES[user.role]),
                key=user.id,
            )

        self.sub_title = format_refreshed(dt.datetime.now())
        if not portfolio.projects:
            logger.warning("Snapshot has no projects")
        self.query_one(TimelineView).refresh()
        self._update_status()

    def _update_status(self) -> None:
        self.query_one("#timeline-status", Static).update(self.session.status_line().to_text())

    def _focus_active_tab(self) -> None:
        active = self.query_one(TabbedContent).active
        if active == "timeline":
            self.query_one(TimelineView).focus()
        elif active in ("clients", "users"):
            self.query_one(f"#{active}-table", DataTable).focus()
