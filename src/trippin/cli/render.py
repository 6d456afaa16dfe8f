"""Rich renderables for CLI output."""

from __future__ import annotations

from collections.abc import Iterable

from rich.console import Console, Group
from rich.table import Table
from rich.text import Text

from trippin.models.journey import Journey, JourneyFork, JourneySource, JourneyStatus
from trippin.models.stop import UserStop

_STATUS_STYLES = {
    JourneyStatus.PLANNED: "cyan",
    JourneyStatus.LIVE: "bold green",
    JourneyStatus.COMPLETED: "dim",
}


def get_console() -> Console:
    return Console(highlight=False)


def status_text(status: JourneyStatus) -> Text:
    return Text(status.value, style=_STATUS_STYLES[status])


def catalog_table(templates: Iterable[JourneySource]) -> Table:
    table = Table(title="Journey templates")
    table.add_column("ID", no_wrap=True)
    table.add_column("Title")
    table.add_column("Location")
    table.add_column("Duration")
    table.add_column("Stops", justify="right")
    for template in templates:
        table.add_row(
            template.id,
            template.title,
            template.location,
            template.duration,
            str(len(template.stops)),
        )
    return table


def forks_table(
    forks: Iterable[JourneyFork], title: str, active_fork_id: str | None = None
) -> Table:
    table = Table(title=title)
    table.add_column("ID", no_wrap=True)
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Visited", justify="right")
    table.add_column("From")
    for fork in forks:
        marker = "* " if fork.id == active_fork_id else ""
        table.add_row(
            f"{marker}{fork.id}",
            fork.title,
            status_text(fork.status),
            f"{fork.visited_count}/{len(fork.stops)}",
            fork.source_journey_id or "custom",
        )
    return table


def journey_detail(journey: Journey) -> Group:
    """Header plus stop list for a template or a fork."""
    header = Text()
    header.append(journey.title, style="bold")
    subtitle = " · ".join(part for part in (journey.location, journey.duration) if part)
    if subtitle:
        header.append(f"  {subtitle}")

    lines: list[Text | Table] = [header]
    if isinstance(journey, JourneyFork):
        meta = Text("Status: ")
        meta.append_text(status_text(journey.status))
        meta.append(f"  Visited {journey.visited_count}/{len(journey.stops)}")
        lines.append(meta)
        if journey.description:
            lines.append(Text(journey.description, style="italic"))
    else:
        lines.append(Text(f"By {journey.author.name}", style="dim"))

    stops = Table(show_header=True, box=None)
    stops.add_column("#", justify="right")
    stops.add_column("Stop", no_wrap=True)
    stops.add_column("Name")
    stops.add_column("")
    for index, stop in enumerate(journey.stops, start=1):
        extra = ""
        if isinstance(stop, UserStop):
            extra = " ".join(p for p in ("✓" if stop.visited else "", stop.note) if p)
        stops.add_row(str(index), stop.id, stop.name, extra)
    lines.append(stops)

    if journey.moments:
        lines.append(Text(f"{len(journey.moments)} moment(s)", style="dim"))
    return Group(*lines)
