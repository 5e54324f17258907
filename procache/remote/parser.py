"""Extract work order data from ProShop HTML pages."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional

from selectolax.parser import HTMLParser, Node

from procache.exceptions import RemoteParseError
from procache.models.work_order import (
    OperationRow,
    SearchResult,
    TrackingRow,
    WorkOrderDetail,
    parse_status,
)

# Routing is the sixth proshop-table on the work order page
ROUTING_TABLE_POSITION = 5

_COMPLETION_RE = re.compile(
    r"(\d{1,2})/(\d{1,2})/(\d{4})\D+(\d{1,2}):(\d{2}):(\d{2})\s*([AaPp][Mm])?"
)
# Time tracking cells embed UTC stamps like 2024-03-14T021533
_TRACKING_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})T(\d{2})(\d{2})(\d{2})")

SCHEDULED_START_LABEL = "Scheduled Start Date:"
SCHEDULED_START_FORMATS = (
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %I:%M %p",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
)


def _text(node: Optional[Node]) -> str:
    return node.text(strip=True) if node is not None else ""


def _decimal(value: str) -> Decimal:
    cleaned = value.replace(",", "").strip()
    if not cleaned:
        return Decimal("0")
    try:
        return Decimal(cleaned)
    except InvalidOperation as exc:
        raise RemoteParseError(f"Not a number: {value!r}") from exc


def _int(value: str) -> int:
    try:
        return int(_decimal(value))
    except (ValueError, OverflowError) as exc:
        raise RemoteParseError(f"Not a whole number: {value!r}") from exc


def _datetime(text: str, *fields: int, **kwargs) -> datetime:
    try:
        return datetime(*fields, **kwargs)
    except (ValueError, OverflowError) as exc:
        raise RemoteParseError(f"Not a valid date: {text!r}") from exc


def parse_completion_title(title: Optional[str]) -> Optional[datetime]:
    """Parse a routing completion tooltip such as ``Done: 03/14/2024; 02:15:33 PM``."""
    if not title:
        return None
    match = _COMPLETION_RE.search(title)
    if not match:
        return None
    month, day, year, hour, minute, second = (int(g) for g in match.groups()[:6])
    meridiem = (match.group(7) or "").upper()
    if meridiem == "PM" and hour != 12:
        hour += 12
    elif meridiem == "AM" and hour == 12:
        hour = 0
    return _datetime(title, year, month, day, hour, minute, second)


def parse_tracking_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    match = _TRACKING_RE.search(value)
    if not match:
        return None
    return _datetime(value, *(int(g) for g in match.groups()), tzinfo=timezone.utc)


def is_login_page(html: str) -> bool:
    return _text(HTMLParser(html).css_first("title")) == "ProShop Login"


def parse_search_results(html: str) -> list[SearchResult]:
    tree = HTMLParser(html)
    rows = tree.css("#dataTable tbody tr") or tree.css("table.dataTable tbody tr")

    results = []
    for row in rows:
        cells = row.css("td")
        if not cells:
            continue
        index = _text(cells[0].css_first("a")) or _text(cells[0])
        if not index:
            continue
        status = parse_status(_text(cells[9])) if len(cells) > 9 else parse_status(None)
        results.append(SearchResult(index=index, reported_status=status))
    return results


def parse_routing_row(row: Node) -> Optional[OperationRow]:
    cells = row.css("td")
    if len(cells) < 3:
        return None

    complete = False
    complete_date = None
    if len(cells) > 9:
        marker = cells[9].css_first("span")
        if marker is not None:
            classes = (marker.attributes.get("class") or "").split()
            complete = "glyphicon-ok" in classes
            if complete:
                complete_date = parse_completion_title(marker.attributes.get("title"))

    return OperationRow(
        op=_text(cells[0].css_first("a")) or _text(cells[0]),
        description=_text(cells[1]),
        resource=_text(cells[2]),
        complete=complete,
        complete_total=_decimal(_text(cells[6])) if len(cells) > 6 else Decimal("0"),
        complete_date=complete_date,
    )


def parse_work_order_page(html: str) -> tuple[str, WorkOrderDetail]:
    """Return the page's work order number and its header/routing data."""
    tree = HTMLParser(html)
    number = tree.css_first("#horizontalMainAtts_workOrderNumber_value")
    if number is None:
        raise RemoteParseError("Work order number not found on page")

    routing_rows = []
    tables = tree.css("table.proshop-table")
    if len(tables) > ROUTING_TABLE_POSITION:
        for row in tables[ROUTING_TABLE_POSITION].css("tbody > tr"):
            parsed = parse_routing_row(row)
            if parsed is not None:
                routing_rows.append(parsed)

    detail = WorkOrderDetail(
        status=parse_status(_text(tree.css_first("#horizontalMainAtts_status_value"))),
        order_quantity=_int(_text(tree.css_first("#horizontalMainAtts_quantityordered_value"))),
        routing_rows=routing_rows,
    )
    return _text(number), detail


def parse_tracking_page(html: str) -> list[TrackingRow]:
    """Collect the machine "Running" entries of a time tracking report."""
    tree = HTMLParser(html)
    rows = []
    for row in tree.css("#dataTable > tbody > tr"):
        cells = row.css("td")
        if len(cells) < 13 or _text(cells[2]) != "Running":
            continue

        started = parse_tracking_date(_text(cells[3].css_first("span")))
        if started is None:
            continue

        # Quantities read "start/end" or a single value, sometimes blank
        quantities = _text(cells[11].css_first("span"))
        if "/" in quantities:
            start_text, end_text = quantities.split("/", 1)
        else:
            start_text = end_text = quantities

        rows.append(
            TrackingRow(
                date_started=started,
                date_ended=parse_tracking_date(_text(cells[4].css_first("span"))),
                op=_text(cells[6]),
                resource=_text(cells[7]),
                quantity_start=_decimal(start_text),
                quantity_end=_decimal(end_text),
                run_total=_decimal(_text(cells[12])),
            )
        )
    return rows


def parse_scheduled_start(html: str) -> Optional[datetime]:
    """Read the scheduled start date from the home job progress widget.

    The widget marks it with an icon titled ``Scheduled Start Date: 03/18/2024``.
    Orders that were never scheduled have no such icon.
    """
    tree = HTMLParser(html)
    for icon in tree.css("a > i"):
        title = icon.attributes.get("title") or ""
        if SCHEDULED_START_LABEL in title:
            text = " ".join(title.split(SCHEDULED_START_LABEL, 1)[1].split())
            break
    else:
        return None

    for fmt in SCHEDULED_START_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    # Optional field; an unreadable stamp leaves it unset
    return None
