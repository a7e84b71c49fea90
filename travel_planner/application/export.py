"""
Itinerary export layout.

ExportFormatter turns a trip and its full day/activity tree into a
paginated, renderer-independent document: every element carries its page
and its vertical position in millimetres on an A4 portrait page. The
layout is a pure function of its input, so the same tree always produces
the same pages. Cover image bytes are fetched by the caller (see
ImageLoader) and passed in.

    title block           trip title, "destination · start - end", lodging line
    [cover image]
    Day N - date          one section per day
      time | title (N min)
           | notes
    ...
    Page i of N           footer on every page
"""
import datetime as dt
import re
import textwrap
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Union
from uuid import UUID

from travel_planner.domain.models import Activity, Day, Trip

PAGE_WIDTH = 210.0
PAGE_HEIGHT = 297.0
MARGIN_X = 14.0
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN_X

TITLE_Y = 20.0
SUBTITLE_Y = 28.0
LODGING_Y = 34.0
CONTENT_START_Y = 45.0
CONTINUATION_START_Y = 20.0
PAGE_BREAK_Y = 270.0  # a day section ending below this starts a new page
PAGE_BOTTOM_Y = 282.0  # rows never cross this line

COVER_IMAGE_HEIGHT = 60.0
COVER_IMAGE_GAP = 8.0

DAY_HEADING_HEIGHT = 5.0
DAY_GAP = 15.0
TIME_COLUMN_WIDTH = 20.0
ROW_LINE_HEIGHT = 5.0
ROW_PADDING = 1.5
ROW_WRAP_CHARS = 80
EMPTY_DAY_TEXT = "No activities"
NO_TIME_LABEL = "--:--"


@dataclass(frozen=True)
class TextElement:
    x: float
    y: float
    text: str
    style: str  # "title" | "subtitle" | "lodging" | "day_heading" | "placeholder"


@dataclass(frozen=True)
class ImageElement:
    x: float
    y: float
    width: float
    height: float
    data: bytes


@dataclass(frozen=True)
class ActivityRow:
    """One table row: time column plus wrapped description lines."""
    x: float
    y: float
    height: float
    time_label: str
    lines: tuple[str, ...]


Element = Union[TextElement, ImageElement, ActivityRow]


@dataclass
class Page:
    number: int
    elements: list[Element] = field(default_factory=list)
    footer: str = ""


@dataclass
class ExportDocument:
    title: str
    filename: str
    pages: list[Page]

    @property
    def page_count(self) -> int:
        return len(self.pages)


def export_filename(title: str) -> str:
    """Trip title with whitespace runs replaced by underscores, plus '.pdf'."""
    name = re.sub(r"\s+", "_", (title or "").strip())
    return f"{name or 'trip'}.pdf"


def format_time(value: Optional[dt.time]) -> str:
    return value.strftime("%H:%M") if value is not None else NO_TIME_LABEL


def format_date(value: dt.date) -> str:
    return value.isoformat()


def activity_sort_key(activity: Activity) -> tuple:
    """Untimed activities first, then by start time."""
    return (activity.start_time is not None, activity.start_time or dt.time.min)


def activity_lines(activity: Activity) -> tuple[str, ...]:
    headline = activity.title
    if activity.duration_minutes is not None:
        headline += f" ({activity.duration_minutes} min)"

    lines = textwrap.wrap(headline, ROW_WRAP_CHARS) or [headline]
    for paragraph in (activity.notes or "").splitlines():
        lines.extend(textwrap.wrap(paragraph, ROW_WRAP_CHARS) or [""])
    return tuple(lines)


def row_height(line_count: int) -> float:
    return line_count * ROW_LINE_HEIGHT + 2 * ROW_PADDING


def lines_that_fit(y: float) -> int:
    """Number of row lines that fit between y and the bottom line."""
    return max(0, int((PAGE_BOTTOM_Y - y - 2 * ROW_PADDING) // ROW_LINE_HEIGHT))


MAX_ROW_LINES = lines_that_fit(CONTINUATION_START_Y)


def first_row_height(lines: Sequence[str]) -> float:
    """Space a day's first row needs right below its heading; an oversized row only needs its first line."""
    if len(lines) > MAX_ROW_LINES:
        return row_height(1)
    return row_height(len(lines))


class ExportFormatter:
    """Builds the paginated layout of a trip itinerary."""

    def build(
        self,
        trip: Trip,
        days: Sequence[Day],
        activities: Iterable[Activity],
        cover_image: Optional[bytes] = None,
    ) -> ExportDocument:
        by_day: dict[UUID, list[Activity]] = defaultdict(list)
        for activity in activities:
            by_day[activity.day_id].append(activity)

        pages = [Page(number=1)]
        page = pages[0]
        page.elements.extend(self._title_block(trip))

        y = CONTENT_START_Y
        if cover_image:
            page.elements.append(ImageElement(
                x=MARGIN_X,
                y=LODGING_Y + 4,
                width=CONTENT_WIDTH,
                height=COVER_IMAGE_HEIGHT,
                data=cover_image,
            ))
            y = LODGING_Y + 4 + COVER_IMAGE_HEIGHT + COVER_IMAGE_GAP

        def new_page() -> Page:
            created = Page(number=len(pages) + 1)
            pages.append(created)
            return created

        for day in sorted(days, key=lambda d: d.day_number):
            day_activities = sorted(by_day.get(day.id, []), key=activity_sort_key)
            day_lines = [activity_lines(a) for a in day_activities]

            # Keep the heading on the same page as the day's first row
            first_need = first_row_height(day_lines[0]) if day_lines else DAY_GAP
            if y > CONTINUATION_START_Y and y + DAY_HEADING_HEIGHT + first_need > PAGE_BOTTOM_Y:
                page = new_page()
                y = CONTINUATION_START_Y

            page.elements.append(TextElement(
                x=MARGIN_X,
                y=y,
                text=f"Day {day.day_number} - {format_date(day.date)}",
                style="day_heading",
            ))
            y += DAY_HEADING_HEIGHT

            if not day_activities:
                page.elements.append(TextElement(
                    x=MARGIN_X, y=y + 5, text=EMPTY_DAY_TEXT, style="placeholder",
                ))
                y += DAY_GAP
            else:
                for activity, lines in zip(day_activities, day_lines):
                    if y + row_height(len(lines)) > PAGE_BOTTOM_Y and len(lines) <= MAX_ROW_LINES:
                        page = new_page()
                        y = CONTINUATION_START_Y

                    # Rows taller than a page continue on the next one without a time label
                    time_label = format_time(activity.start_time)
                    while lines:
                        fit = lines_that_fit(y)
                        if fit < 1:
                            page = new_page()
                            y = CONTINUATION_START_Y
                            continue
                        chunk, lines = lines[:fit], lines[fit:]
                        height = row_height(len(chunk))
                        page.elements.append(ActivityRow(
                            x=MARGIN_X,
                            y=y,
                            height=height,
                            time_label=time_label,
                            lines=chunk,
                        ))
                        y += height
                        time_label = ""
                y += DAY_GAP

            if y > PAGE_BREAK_Y:
                page = new_page()
                y = CONTINUATION_START_Y

        # A break after the last day leaves an empty trailing page
        if len(pages) > 1 and not pages[-1].elements:
            pages.pop()

        total = len(pages)
        for p in pages:
            p.footer = f"Page {p.number} of {total}"

        return ExportDocument(title=trip.title, filename=export_filename(trip.title), pages=pages)

    def _title_block(self, trip: Trip) -> list[TextElement]:
        elements = [
            TextElement(x=MARGIN_X, y=TITLE_Y, text=trip.title, style="title"),
            TextElement(
                x=MARGIN_X,
                y=SUBTITLE_Y,
                text=f"{trip.destination} · {format_date(trip.start_date)} - {format_date(trip.end_date)}",
                style="subtitle",
            ),
        ]
        lodging = lodging_line(trip)
        if lodging:
            elements.append(TextElement(x=MARGIN_X, y=LODGING_Y, text=lodging, style="lodging"))
        return elements


def lodging_line(trip: Trip) -> Optional[str]:
    parts = []
    if trip.lodging_name:
        parts.append(f"Stay: {trip.lodging_name}")
    if trip.arrival_info:
        parts.append(f"Arrival: {trip.arrival_info}")
    return " · ".join(parts) or None
