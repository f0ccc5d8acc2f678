"""Frame layout for the curses renderer.

`compose` turns the application state into styled lines and is free of any
terminal calls; `paint` writes those lines to a curses window.
"""

import curses
from enum import Enum
from typing import Optional

from ..enums import OverlayFocus
from ..form.state import FormState
from ..utils import truncate

FOOTER_HEIGHT = 3
DEFAULT_TITLE = "SchemaUI"


class Style(Enum):
    NORMAL = "normal"
    TITLE = "title"
    TAB = "tab"
    ACTIVE_TAB = "active_tab"
    SELECTED = "selected"
    ERROR = "error"
    DIM = "dim"


Segment = tuple[str, Style]
Line = list[Segment]

MAX_VARIANT_SUMMARIES = 3


def tab_strip(titles: list[str], active: Optional[int], style: Style = Style.ACTIVE_TAB) -> Line:
    line: Line = []
    for index, title in enumerate(titles):
        line.append((f" {title} ", style if index == active else Style.TAB))
        line.append(("│", Style.DIM))
    return line[:-1]


def form_lines(form: FormState, width: int) -> tuple[list[Line], int]:
    """Lines for the focused section of `form` and the row of the focused field."""
    lines: list[Line] = []
    section = form.current_section()
    if section is None:
        return [[("No editable fields", Style.DIM)]], 0

    if section.description:
        lines.append([(truncate(section.description, width), Style.DIM)])
    focus_row = len(lines)
    focused = form.focused_field()
    for field_state in section.fields:
        label = field_state.schema.display_label()
        if field_state.schema.required:
            label += " *"
        is_focused = field_state is focused
        marker = "›" if is_focused else " "
        if is_focused:
            focus_row = len(lines)
        lines.append([(f"{marker} {label}: {field_state.display_value()}", Style.SELECTED if is_focused else Style.NORMAL)])
        if field_state.error:
            lines.append([(f"    ! {field_state.error}", Style.ERROR)])
        summaries = field_state.component.composite_summaries()
        if summaries:
            lines.extend(variant_summary_lines(summaries, width))
    return lines, focus_row


def variant_summary_lines(summaries, width: int) -> list[Line]:
    lines: list[Line] = [[("  Active variants:", Style.DIM)]]
    for summary in summaries[:MAX_VARIANT_SUMMARIES]:
        lines.append([("  • ", Style.DIM), (summary.title, Style.TITLE)])
        if summary.description:
            lines.append([(truncate(f"     {summary.description}", width), Style.DIM)])
        for text in summary.lines:
            lines.append([(truncate(f"     {text}", width), Style.NORMAL)])
    hidden = len(summaries) - MAX_VARIANT_SUMMARIES
    if hidden > 0:
        lines.append([(f"    … ({hidden} more active variants)", Style.DIM)])
    return lines


def overlay_lines(overlay, width: int) -> tuple[list[Line], int]:
    lines: list[Line] = [[(f"[L{overlay.level}] {overlay.display_title}", Style.TITLE)]]
    if overlay.dirty():
        lines[0].append((" *", Style.TITLE))
    if overlay.display_description:
        lines.append([(truncate(overlay.display_description, width), Style.DIM)])
    if overlay.list_entries is not None:
        style = Style.ACTIVE_TAB if overlay.focus == OverlayFocus.ENTRY_TABS else Style.SELECTED
        lines.append(tab_strip(overlay.list_entries, overlay.list_selected, style))
    form = overlay.form_state
    root = form.current_root()
    if root is not None and len(root.sections) > 1:
        lines.append(tab_strip([section.title for section in root.sections], form.section_index))
    if overlay.commit_error:
        lines.append([(f"! {overlay.commit_error}", Style.ERROR)])

    body, focus_row = form_lines(form, width)
    offset = len(lines)
    lines.extend(body)
    if overlay.instructions:
        lines.append([(overlay.instructions, Style.DIM)])
    return lines, offset + focus_row


def popup_lines(popup) -> list[Line]:
    lines: list[Line] = [[(popup.title, Style.TITLE)]]
    for index, option in enumerate(popup.options):
        prefix = ""
        if popup.multi:
            prefix = "[x] " if index < len(popup.flags) and popup.flags[index] else "[ ] "
        style = Style.SELECTED if index == popup.selected else Style.NORMAL
        lines.append([(f"  {prefix}{option}", style)])
    return lines


def visible_window(lines: list[Line], focus_row: int, height: int) -> list[Line]:
    if height <= 0:
        return []
    if len(lines) > height:
        start = max(0, min(focus_row - height // 2, len(lines) - height))
        lines = lines[start : start + height]
    return lines + [[] for _ in range(height - len(lines))]


def footer_lines(app) -> list[Line]:
    badge_style = Style.ERROR if app.validation_errors else Style.DIM
    badge: Line = [(f"Errors: {app.validation_errors}", badge_style)]
    if app.global_errors:
        badge.append((f"  {app.global_errors[0]}", Style.ERROR))
    return [
        [(app.status.message, Style.NORMAL)],
        badge,
        [(app.help_text() or "", Style.DIM)],
    ]


def compose(app, width: int, height: int) -> list[Line]:
    form = app.form_state
    title = form.title or DEFAULT_TITLE
    header: list[Line] = [[(title, Style.TITLE)]]
    if form.is_dirty():
        header[0].append((" *", Style.TITLE))
    header.append(tab_strip([root.title for root in form.roots], form.root_index))
    root = form.current_root()
    if root is not None:
        header.append(tab_strip([section.title for section in root.sections], form.section_index))

    if app.popup is not None:
        body, focus_row = popup_lines(app.popup), app.popup.selected + 1
    elif app.overlays:
        body, focus_row = overlay_lines(app.active_overlay(), width)
    else:
        body, focus_row = form_lines(form, width)

    body_height = height - len(header) - FOOTER_HEIGHT
    return header + visible_window(body, focus_row, body_height) + footer_lines(app)


def style_attrs() -> dict[Style, int]:
    return {
        Style.NORMAL: curses.A_NORMAL,
        Style.TITLE: curses.A_BOLD,
        Style.TAB: curses.A_NORMAL,
        Style.ACTIVE_TAB: curses.A_REVERSE | curses.A_BOLD,
        Style.SELECTED: curses.A_REVERSE,
        Style.ERROR: curses.A_BOLD | curses.A_UNDERLINE,
        Style.DIM: curses.A_DIM,
    }


def paint(window, lines: list[Line]) -> None:
    height, width = window.getmaxyx()
    attrs = style_attrs()
    for y, line in enumerate(lines[:height]):
        x = 0
        for text, style in line:
            room = width - 1 - x
            if room <= 0:
                break
            chunk = text[:room]
            try:
                window.addstr(y, x, chunk, attrs[style])
            except curses.error:
                # writing into the last cell of the window moves the cursor out of bounds
                pass
            x += len(chunk)
