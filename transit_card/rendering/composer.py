"""Raster preview of a CardView."""

from __future__ import annotations

from PIL import Image, ImageDraw, ImageFont

from transit_card.rendering.view_model import (
    STATUS_ERROR,
    STATUS_INACTIVE,
    STATUS_MISSING,
    CardView,
    SourceView,
)

DISPLAY_WIDTH = 320
HEADER_HEIGHT = 18
ROW_HEIGHT = 14

TYPE_BAR_WIDTH = 3

DOT_DIAMETER = 6
DOT_RADIUS = DOT_DIAMETER // 2
DOT_LEFT_MARGIN = 4
DOT_CENTER_OFFSET = DOT_LEFT_MARGIN + DOT_RADIUS

TEXT_LEFT_X = 14
TEXT_RIGHT_MARGIN = 4

COLOR_BACKGROUND = (30, 30, 30)
COLOR_TEXT = (255, 255, 255)
COLOR_SECONDARY = (179, 179, 179)
COLOR_ACCENT = (0, 188, 212)
COLOR_REALTIME = (76, 175, 80)
COLOR_PLANNED = (72, 72, 72)
COLOR_ERROR = (244, 67, 54)
COLOR_WARNING = (255, 193, 7)
COLOR_SEPARATOR = (48, 48, 48)

TYPE_COLORS = {"bim": COLOR_ACCENT, "bus": COLOR_WARNING}
PRIORITY_COLORS = {"high": COLOR_ERROR, "medium": COLOR_WARNING}
STATUS_BAR_COLORS = {STATUS_MISSING: COLOR_SECONDARY, STATUS_ERROR: COLOR_ERROR, STATUS_INACTIVE: COLOR_PLANNED}
STATUS_DOT_COLORS = {STATUS_ERROR: COLOR_ERROR, STATUS_INACTIVE: COLOR_PLANNED}

TEXT_LOADING = "Loading data..."
TEXT_ERROR = "Error loading departures"
TEXT_INACTIVE = "Line is currently inactive"
TEXT_EMPTY = "No departures found"

ROW_SECTION = "section"
ROW_DEPARTURE = "departure"
ROW_PLACEHOLDER = "placeholder"
ROW_DISTURBANCE = "disturbance"
ROW_SUMMARY = "summary"

FONT = ImageFont.load_default()


def layout_rows(view: CardView) -> list[tuple[str, SourceView, object]]:
    """Flatten the card into drawable rows, top to bottom."""
    rows: list[tuple[str, SourceView, object]] = []
    for source in view.sources:
        rows.append((ROW_SECTION, source, None))
        if source.status == STATUS_MISSING:
            rows.append((ROW_PLACEHOLDER, source, TEXT_LOADING))
            continue
        if source.status == STATUS_ERROR:
            rows.append((ROW_PLACEHOLDER, source, TEXT_ERROR))
            continue
        if source.status == STATUS_INACTIVE:
            rows.append((ROW_PLACEHOLDER, source, TEXT_INACTIVE))
        elif source.departures:
            rows.extend((ROW_DEPARTURE, source, dep) for dep in source.departures)
        else:
            rows.append((ROW_PLACEHOLDER, source, TEXT_EMPTY))
        if not source.disturbances:
            continue
        if source.expanded:
            rows.extend((ROW_DISTURBANCE, source, item) for item in source.disturbances)
        else:
            rows.append((ROW_SUMMARY, source, len(source.disturbances)))
    return rows


def row_top(index: int) -> int:
    return HEADER_HEIGHT + index * ROW_HEIGHT


def _priority_color(priority: str) -> tuple[int, int, int]:
    return PRIORITY_COLORS.get(priority.casefold(), COLOR_SECONDARY)


def _text_y(draw: ImageDraw.ImageDraw, top: int, height: int, text: str) -> int:
    bbox = draw.textbbox((0, 0), text or " ", font=FONT)
    return top + (height - (bbox[3] - bbox[1])) // 2 - bbox[1]


def _draw_right(draw: ImageDraw.ImageDraw, width: int, top: int, text: str, color) -> None:
    bbox = draw.textbbox((0, 0), text, font=FONT)
    text_x = width - TEXT_RIGHT_MARGIN - (bbox[2] - bbox[0])
    draw.text((text_x, _text_y(draw, top, ROW_HEIGHT, text)), text, font=FONT, fill=color)


def _draw_dot(draw: ImageDraw.ImageDraw, top: int, color) -> None:
    dot_top = top + (ROW_HEIGHT - DOT_DIAMETER) // 2
    draw.ellipse(
        [DOT_LEFT_MARGIN, dot_top, DOT_LEFT_MARGIN + DOT_DIAMETER - 1, dot_top + DOT_DIAMETER - 1],
        fill=color,
    )


def _draw_row(draw: ImageDraw.ImageDraw, width: int, top: int, kind: str, source: SourceView, item) -> None:
    if kind == ROW_SECTION:
        bar_color = STATUS_BAR_COLORS.get(source.status) or TYPE_COLORS.get(source.type, COLOR_ACCENT)
        draw.rectangle((0, top, TYPE_BAR_WIDTH - 1, top + ROW_HEIGHT - 1), fill=bar_color)
        label = source.source_id
        draw.text((TEXT_LEFT_X, _text_y(draw, top, ROW_HEIGHT, label)), label, font=FONT, fill=COLOR_TEXT)
        _draw_right(draw, width, top, source.stop or source.name, COLOR_SECONDARY)
        draw.line((0, top + ROW_HEIGHT - 1, width - 1, top + ROW_HEIGHT - 1), fill=COLOR_SEPARATOR)
        return

    if kind == ROW_DEPARTURE:
        _draw_dot(draw, top, COLOR_REALTIME if item.realtime else COLOR_PLANNED)
        text = f"{item.line}  {item.direction}"
        draw.text((TEXT_LEFT_X, _text_y(draw, top, ROW_HEIGHT, text)), text, font=FONT, fill=COLOR_TEXT)
        right = f"{item.clock_time}  {item.countdown_text}" if item.clock_time else item.countdown_text
        _draw_right(draw, width, top, right, COLOR_ACCENT)
        return

    if kind == ROW_DISTURBANCE:
        _draw_dot(draw, top, _priority_color(item.priority))
        draw.text((TEXT_LEFT_X, _text_y(draw, top, ROW_HEIGHT, item.title)), item.title, font=FONT, fill=COLOR_SECONDARY)
        return

    if kind == ROW_SUMMARY:
        worst = COLOR_SECONDARY
        priorities = {entry.priority.casefold() for entry in source.disturbances}
        if "high" in priorities:
            worst = COLOR_ERROR
        elif "medium" in priorities:
            worst = COLOR_WARNING
        _draw_dot(draw, top, worst)
        text = f"{item} disturbance" + ("" if item == 1 else "s")
        draw.text((TEXT_LEFT_X, _text_y(draw, top, ROW_HEIGHT, text)), text, font=FONT, fill=COLOR_SECONDARY)
        return

    dot_color = STATUS_DOT_COLORS.get(source.status)
    if dot_color is not None:
        _draw_dot(draw, top, dot_color)
    text = str(item)
    draw.text((TEXT_LEFT_X, _text_y(draw, top, ROW_HEIGHT, text)), text, font=FONT, fill=COLOR_SECONDARY)


def compose_card(view: CardView, width: int = DISPLAY_WIDTH) -> Image.Image:
    """Compose an RGB image of the card; height grows with the row count."""
    if width < TEXT_LEFT_X * 4:
        raise ValueError(f"Width must be at least {TEXT_LEFT_X * 4}, got {width}.")

    rows = layout_rows(view)
    height = row_top(len(rows))
    image = Image.new("RGB", (width, height), COLOR_BACKGROUND)
    draw = ImageDraw.Draw(image)

    draw.text((TEXT_LEFT_X, _text_y(draw, 0, HEADER_HEIGHT, view.title)), view.title, font=FONT, fill=COLOR_TEXT)
    for index, (kind, source, item) in enumerate(rows):
        _draw_row(draw, width, row_top(index), kind, source, item)

    return image


__all__ = ["compose_card", "layout_rows", "row_top"]
