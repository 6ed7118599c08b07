"""Plain-text renderers for Brave Search results."""

from typing import Any, Dict, Iterable, List, Optional

from ..shared.types import DayHours, MergedPoiView, OpeningHours

RECORD_SEPARATOR = "\n---\n"
WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def _field(value: Any, placeholder: str = "N/A") -> str:
    if value is None or value == "":
        return placeholder
    return str(value)


def format_web_results(query: str, data: Dict[str, Any]) -> str:
    results = (data.get("web") or {}).get("results") or []
    if not results:
        return f'No results found for "{query}"'
    return "\n\n".join(
        f"Title: {_field(r.get('title'))}\n"
        f"URL: {_field(r.get('url'))}\n"
        f"Description: {_field(r.get('description'))}"
        for r in results
    )


def format_news_results(query: str, data: Dict[str, Any]) -> str:
    results = data.get("results") or []
    if not results:
        return f'No news results found for "{query}"'
    return "\n\n".join(
        f"Title: {_field(r.get('title'))}\n"
        f"URL: {_field(r.get('url'))}\n"
        f"Age: {_field(r.get('age'))}\n"
        f"Description: {_field(r.get('description'))}\n"
        for r in results
    )


def _format_video(result: Dict[str, Any]) -> str:
    video = result.get("video") or {}
    lines = [
        f"Title: {_field(result.get('title'))}",
        f"URL: {_field(result.get('url'))}",
        f"Description: {_field(result.get('description'))}",
        f"Age: {_field(result.get('age'))}",
        f"Duration: {_field(video.get('duration'))}",
        f"Views: {_field(video.get('views'))}",
        f"Creator: {_field(video.get('creator'))}",
    ]
    if "requires_subscription" in video:
        lines.append("Requires subscription" if video["requires_subscription"] else "No subscription")
    if video.get("tags"):
        lines.append(f"Tags: {', '.join(str(t) for t in video['tags'])}")
    return "\n".join(lines)


def format_video_results(query: str, data: Dict[str, Any]) -> str:
    results = data.get("results") or []
    if not results:
        return f'No video results found for "{query}"'
    return RECORD_SEPARATOR.join(_format_video(r) for r in results)


def _follows(previous: str, name: str) -> bool:
    """True if ``name`` is the weekday right after ``previous`` (Sun wraps to Mon)."""
    if previous not in WEEKDAYS or name not in WEEKDAYS:
        return False
    return (WEEKDAYS.index(previous) + 1) % len(WEEKDAYS) == WEEKDAYS.index(name)


def _join_intervals(slot: Iterable[DayHours]) -> str:
    return ", ".join(day.interval for day in slot)


def format_opening_hours(hours: OpeningHours) -> List[str]:
    """Compress a weekly schedule into one line per run of identical days.

    The first line lists today's intervals. Consecutive days with the same
    intervals collapse into a range label such as ``Mon–Fri``. A day missing
    from the list or sent as an empty slot is closed and ends the run. The run
    containing today is suffixed with ``(today)``.
    """
    today_names = {day.abbr_name for day in hours.today}
    lines: List[str] = []
    if hours.today:
        lines.append(f"Today: {hours.today[0].abbr_name} {_join_intervals(hours.today)}")

    runs: List[Dict[str, Any]] = []
    previous: Optional[Dict[str, Any]] = None
    for slot in hours.days:
        if not slot:
            # closed day, breaks the run
            previous = None
            continue
        name = slot[0].abbr_name
        intervals = _join_intervals(slot)
        if (
            previous is not None
            and previous["intervals"] == intervals
            and _follows(previous["last"], name)
        ):
            previous["last"] = name
            previous["today"] = previous["today"] or name in today_names
            continue
        previous = {"first": name, "last": name, "intervals": intervals, "today": name in today_names}
        runs.append(previous)

    for run in runs:
        label = run["first"] if run["first"] == run["last"] else f"{run['first']}–{run['last']}"
        line = f"{label}: {run['intervals']}"
        if run["today"]:
            line += " (today)"
        lines.append(line)
    return lines


def format_poi(view: MergedPoiView) -> str:
    """Render one location as a fixed multi-line block."""
    record = view.record
    lines = [f"Name: {_field(record.title)}"]
    if record.cuisines:
        lines.append(f"Cuisine: {', '.join(record.cuisines)}")
    lines.extend([
        f"Address: {_field(record.display_address, 'No address found')}",
        f"Phone: {_field(record.phone, 'No phone number found')}",
        f"Email: {_field(record.email, 'No email found')}",
        f"Price Range: {_field(record.price_range, 'No price range found')}",
        f"Ratings: {_field(record.rating_value or None)} ({_field(record.review_count, '0')}) reviews",
    ])

    hours = format_opening_hours(record.opening_hours) if record.opening_hours else []
    if hours:
        lines.append("Hours:")
        lines.extend(f"  {line}" for line in hours)
    else:
        lines.append("Hours: No opening hours found")

    description = view.description.description if view.description else None
    lines.append(f"Description: {_field(description, 'No description found')}")
    return "\n".join(lines)


def format_poi_results(views: Iterable[MergedPoiView]) -> str:
    return RECORD_SEPARATOR.join(format_poi(view) for view in views)
