"""
Tests for the PDF export: the page layout and the rendered file.
"""
import datetime as dt
from uuid import uuid4

import pytest

from travel_planner.application.export import (
    ActivityRow,
    ExportFormatter,
    ImageElement,
    PAGE_BOTTOM_Y,
    TextElement,
    activity_lines,
    export_filename,
)
from travel_planner.domain.models import Activity, ActivityCategory, Day, Trip
from travel_planner.infrastructure.image_search import get_image_loader
from travel_planner.infrastructure.pdf_renderer import PdfRenderer, latin1
from travel_planner.main import app

from conftest import create_trip


def make_trip(**fields) -> Trip:
    data = dict(
        owner_id=uuid4(),
        title="Rome Trip",
        destination="Rome",
        start_date=dt.date(2025, 6, 1),
        end_date=dt.date(2025, 6, 3),
        lodging_name="Hotel Artemide",
    )
    data.update(fields)
    return Trip(**data)


def make_days(trip: Trip) -> list[Day]:
    count = (trip.end_date - trip.start_date).days + 1
    return [
        Day(trip_id=trip.id, date=trip.start_date + dt.timedelta(days=i), day_number=i + 1)
        for i in range(count)
    ]


def make_activity(day: Day, title: str, start=None, duration=60, notes=None) -> Activity:
    return Activity(
        day_id=day.id,
        title=title,
        category=ActivityCategory.CULTURE,
        start_time=start,
        duration_minutes=duration,
        notes=notes,
    )


def texts(document, style):
    return [
        e.text
        for page in document.pages
        for e in page.elements
        if isinstance(e, TextElement) and e.style == style
    ]


def rows(document):
    return [e for page in document.pages for e in page.elements if isinstance(e, ActivityRow)]


class TestExportFormatter:

    def test_title_block_and_day_headings(self):
        trip = make_trip(arrival_info="FCO")
        days = make_days(trip)

        document = ExportFormatter().build(trip, days, [])

        assert texts(document, "title") == ["Rome Trip"]
        assert texts(document, "subtitle") == ["Rome · 2025-06-01 - 2025-06-03"]
        assert texts(document, "lodging") == ["Stay: Hotel Artemide · Arrival: FCO"]
        assert texts(document, "day_heading") == [
            "Day 1 - 2025-06-01",
            "Day 2 - 2025-06-02",
            "Day 3 - 2025-06-03",
        ]
        assert texts(document, "placeholder") == ["No activities"] * 3

    def test_rows_in_time_order_with_untimed_first(self):
        trip = make_trip(end_date=dt.date(2025, 6, 1))
        (day,) = make_days(trip)
        activities = [
            make_activity(day, "Dinner", dt.time(20, 0), duration=None),
            make_activity(day, "Pack bags", None),
            make_activity(day, "Vatican", dt.time(9, 0), notes="Tickets in the app"),
        ]

        document = ExportFormatter().build(trip, [day], activities)

        assert [(r.time_label, r.lines) for r in rows(document)] == [
            ("--:--", ("Pack bags (60 min)",)),
            ("09:00", ("Vatican (60 min)", "Tickets in the app")),
            ("20:00", ("Dinner",)),
        ]

    def test_long_itinerary_spans_pages(self):
        trip = make_trip(end_date=dt.date(2025, 6, 2))
        days = make_days(trip)
        activities = [
            make_activity(days[i % 2], f"Stop {i}", dt.time(6 + i // 4, (i % 4) * 15), duration=15)
            for i in range(60)
        ]

        document = ExportFormatter().build(trip, days, activities)

        assert document.page_count >= 2
        assert [p.footer for p in document.pages] == [
            f"Page {i} of {document.page_count}" for i in range(1, document.page_count + 1)
        ]
        assert len(rows(document)) == 60
        assert all(r.y + r.height <= PAGE_BOTTOM_Y for r in rows(document))
        assert all(page.elements for page in document.pages)

    def test_row_taller_than_a_page_continues_on_next_page(self):
        trip = make_trip(end_date=dt.date(2025, 6, 1))
        (day,) = make_days(trip)
        notes = " ".join(["Remember the museum pass and the timed entry ticket"] * 90)
        activity = make_activity(day, "Uffizi", dt.time(9, 0), notes=notes)

        document = ExportFormatter().build(trip, [day], [activity])

        parts = rows(document)
        assert len(parts) >= 2
        assert all(r.y + r.height <= PAGE_BOTTOM_Y for r in parts)
        assert [r.time_label for r in parts] == ["09:00"] + [""] * (len(parts) - 1)
        assert tuple(line for r in parts for line in r.lines) == activity_lines(activity)

    @pytest.mark.parametrize("note_lines", [5, 31, 35, 39])
    def test_day_heading_stays_with_first_row(self, note_lines):
        trip = make_trip(end_date=dt.date(2025, 6, 2))
        days = make_days(trip)
        activities = [
            make_activity(days[0], "Walk", dt.time(9, 0), notes="\n".join(f"stop {i}" for i in range(note_lines))),
            make_activity(days[1], "Day trip", dt.time(8, 0), notes="\n".join(f"leg {i}" for i in range(9))),
        ]

        document = ExportFormatter().build(trip, days, activities)

        for page in document.pages:
            for index, element in enumerate(page.elements):
                if isinstance(element, TextElement) and element.style == "day_heading":
                    following = page.elements[index + 1:]
                    assert following and isinstance(following[0], ActivityRow)
        assert all(r.y + r.height <= PAGE_BOTTOM_Y for r in rows(document))

    def test_layout_is_deterministic(self):
        trip = make_trip()
        days = make_days(trip)
        activities = [make_activity(days[1], "Colosseum", dt.time(10, 0))]

        first = ExportFormatter().build(trip, days, activities)
        second = ExportFormatter().build(trip, days, list(reversed(activities)))

        assert first.pages == second.pages

    def test_cover_image_pushes_content_down(self):
        trip = make_trip()
        days = make_days(trip)

        without = ExportFormatter().build(trip, days, [])
        with_cover = ExportFormatter().build(trip, days, [], cover_image=b"\x89PNG")

        images = [e for e in with_cover.pages[0].elements if isinstance(e, ImageElement)]
        assert len(images) == 1
        assert images[0].data == b"\x89PNG"

        def first_heading_y(document):
            return next(
                e.y for e in document.pages[0].elements
                if isinstance(e, TextElement) and e.style == "day_heading"
            )

        assert first_heading_y(with_cover) > first_heading_y(without)

    def test_filename(self):
        assert export_filename("Rome Trip") == "Rome_Trip.pdf"
        assert export_filename("  Summer   in Lisbon ") == "Summer_in_Lisbon.pdf"
        assert export_filename("") == "trip.pdf"


class TestPdfRenderer:

    def test_renders_pdf_bytes(self):
        trip = make_trip(title="Zürich → Milano")
        days = make_days(trip)
        document = ExportFormatter().build(trip, days, [make_activity(days[0], "Café", dt.time(8, 0))])

        pdf = PdfRenderer().render(document)

        assert pdf.startswith(b"%PDF")

    def test_latin1_replaces_unsupported_characters(self):
        assert latin1("Zürich → Milano") == "Zürich ? Milano"


class FakeImageLoader:
    def __init__(self):
        self.urls = []

    async def load(self, url):
        self.urls.append(url)
        return None


async def test_export_endpoint(client, alice):
    trip = await create_trip(client, alice)
    await client.post(
        f"/api/trips/{trip['id']}/days/{trip['days'][0]['id']}/activities",
        json={"title": "Colosseum", "start_time": "09:00"},
        headers=alice["headers"],
    )
    loader = FakeImageLoader()
    app.dependency_overrides[get_image_loader] = lambda: loader

    response = await client.get(f"/api/trips/{trip['id']}/export", headers=alice["headers"])

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == "attachment; filename*=UTF-8''Rome_Trip.pdf"
    assert response.content.startswith(b"%PDF")
    assert loader.urls == [trip["image_url"]]


async def test_export_requires_access(client, alice, bob):
    trip = await create_trip(client, alice)

    response = await client.get(f"/api/trips/{trip['id']}/export", headers=bob["headers"])

    assert response.status_code == 404
