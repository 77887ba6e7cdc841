# Flight table extraction from the rendered FIDS page.

from dataclasses import dataclass
import logging
from typing import Any, List, Optional, TypedDict

from bs4 import BeautifulSoup
from bs4.element import Tag

from airlines import resolve_airline_name
from flight_times import parse_time_and_delay

log = logging.getLogger("fids_proxy.flight_table")

HEADER_MARKER = "origin"


class ParseError(ValueError):
    pass


class FlightJson(TypedDict, total=False):
    # airlineImg is left out for rows without a logo.
    airlineImg: str
    airlineName: str
    flightNo: str
    dest: str
    std: str
    etd: str
    delayMins: int
    gate: str
    status: str


@dataclass(frozen=True)
class FlightRecord:
    airline_img: Optional[str]
    airline_name: str
    flight_no: str
    dest: str
    std: str
    etd: str
    delay_mins: int
    gate: str
    status: str

    def to_json(self) -> FlightJson:
        data: FlightJson = {}
        if self.airline_img is not None:
            data["airlineImg"] = self.airline_img
        data.update({
            "airlineName": self.airline_name,
            "flightNo": self.flight_no,
            "dest": self.dest,
            "std": self.std,
            "etd": self.etd,
            "delayMins": self.delay_mins,
            "gate": self.gate,
            "status": self.status,
        })
        return data


@dataclass(frozen=True)
class ColumnMap:
    """Positions of the board columns inside a ``<tr>``.

    Column 3 is not extracted. Negative positions count from the end of the
    row and are not covered by ``min_cells``; rows too short for them are
    skipped.
    """

    airline: int = 0
    flight_no: int = 1
    dest: int = 2
    time: int = 4
    gate: int = 5
    status: int = 6

    @property
    def min_cells(self) -> int:
        return max(self.airline, self.flight_no, self.dest, self.time, self.gate, self.status) + 1


DEFAULT_COLUMNS = ColumnMap()
def is_header_row(dest_text: str) -> bool:
    # The header can sit anywhere in the markup; its destination cell reads "Origin/Destination".
    return HEADER_MARKER in dest_text.lower()


def column(cells: List[Tag], index: int) -> Tag:
    try:
        return cells[index]
    except IndexError as exc:
        raise ParseError(f"no cell at column {index} in a {len(cells)}-cell row") from exc


def cell_text(cell: Tag) -> str:
    return cell.get_text().strip()


def image_src(cell: Tag) -> Optional[str]:
    img = cell.find("img")
    if not isinstance(img, Tag):
        return None
    src: Any = img.get("src")
    if isinstance(src, list):
        src = " ".join(src)
    return src


def parse_row(cells: List[Tag], dest: str, columns: ColumnMap) -> FlightRecord:
    airline_img = image_src(column(cells, columns.airline))
    times = parse_time_and_delay(cell_text(column(cells, columns.time)))
    return FlightRecord(
        airline_img=airline_img,
        airline_name=resolve_airline_name(airline_img),
        flight_no=cell_text(column(cells, columns.flight_no)),
        dest=dest,
        std=times.std,
        etd=times.etd,
        delay_mins=times.delay_mins,
        gate=cell_text(column(cells, columns.gate)),
        status=cell_text(column(cells, columns.status)),
    )


def parse_flights(html: str, columns: ColumnMap = DEFAULT_COLUMNS) -> List[FlightRecord]:
    soup = BeautifulSoup(html, "lxml")
    flights: List[FlightRecord] = []

    for index, row in enumerate(soup.find_all("tr")):
        cells = row.find_all("td")
        if len(cells) < columns.min_cells:
            continue

        try:
            dest = cell_text(column(cells, columns.dest))
            if is_header_row(dest):
                continue
            flights.append(parse_row(cells, dest, columns))
        except ParseError as exc:
            log.warning("Skipping row %d: %s", index, exc)

    return flights
