from dataclasses import dataclass
from mgnrega_dashboard.core.config import settings
from mgnrega_dashboard.engine.aggregation import round_half_up


@dataclass(frozen=True)
class Announcement:
    text: str
    locale: str


def build_announcement(chart, locale=None):
    """Text for the browser to speak about the best-paying district, or None."""
    if not chart:
        return None
    top = chart[0]
    return Announcement(
        text=f"{top.district} average daily wage {round_half_up(top.wage)} rupees",
        locale=locale or settings.SPEECH_LOCALE,
    )
