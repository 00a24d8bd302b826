"""
Comparable Set Provenance

Describes where a comparable set came from so the presentation layer can
show a consistent trust badge wherever the set is displayed.

Sources:
- repliers_similar: MLS similar-listings algorithm (default)
- coordinate_fallback: radius search used when the MLS has no candidates
- manual: hand-picked or edited by the agent

Unrecognised source tags are treated as repliers_similar.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Union


class CompSource(Enum):
    """Origin of a comparable set."""
    REPLIERS_SIMILAR = "repliers_similar"
    COORDINATE_FALLBACK = "coordinate_fallback"
    MANUAL = "manual"

    @classmethod
    def from_string(cls, value: Optional[str]) -> Optional["CompSource"]:
        """Convert string to CompSource, or None if unrecognised."""
        if not value:
            return None
        for member in cls:
            if member.value == value:
                return member
        return None


DEFAULT_SOURCE = CompSource.REPLIERS_SIMILAR

# Coordinate fallback search parameters
FALLBACK_RADIUS_MILES = 5
FALLBACK_PRICE_TOLERANCE_PERCENT = 25
FALLBACK_BEDROOM_TOLERANCE = 1


SOURCE_CONFIG = {
    CompSource.REPLIERS_SIMILAR: {
        "label": "MLS Comparables",
        "short_label": "MLS",
        "color": "text-green-600 dark:text-green-400",
        "bg_color": "bg-green-50 dark:bg-green-950/30",
        "border_color": "border-green-200 dark:border-green-800",
        "description": (
            "Automatically fetched from the MLS using Repliers' "
            "similar listings algorithm."
        ),
        "details": [
            "Location and neighborhood",
            "Price range",
            "Property characteristics (beds, baths, sqft)",
        ],
        "details_heading": "Algorithm considers:",
        "note": None,
    },
    CompSource.COORDINATE_FALLBACK: {
        "label": "Nearby Property Search",
        "short_label": "Nearby",
        "color": "text-blue-600 dark:text-blue-400",
        "bg_color": "bg-blue-50 dark:bg-blue-950/30",
        "border_color": "border-blue-200 dark:border-blue-800",
        "description": (
            "Generated using a coordinate-based search within "
            f"{FALLBACK_RADIUS_MILES} miles of this property."
        ),
        "details": [
            f"Radius: {FALLBACK_RADIUS_MILES} miles",
            f"Price range: ±{FALLBACK_PRICE_TOLERANCE_PERCENT}% of list price",
            f"Bedrooms: ±{FALLBACK_BEDROOM_TOLERANCE} of subject property",
        ],
        "details_heading": "Search criteria:",
        "note": (
            "This method is used when standard MLS comparables are not "
            "available (e.g., for closed listings)."
        ),
    },
    CompSource.MANUAL: {
        "label": "Manually Selected",
        "short_label": "Manual",
        "color": "text-purple-600 dark:text-purple-400",
        "bg_color": "bg-purple-50 dark:bg-purple-950/30",
        "border_color": "border-purple-200 dark:border-purple-800",
        "description": "These comparables were manually selected or modified.",
        "details": [],
        "details_heading": None,
        "note": None,
    },
}


TimestampInput = Union[datetime, str, None]


@dataclass
class SourceDescriptor:
    """Display data for a comparable set's provenance badge."""
    source: CompSource
    label: str
    short_label: str
    color: str
    bg_color: str
    border_color: str
    description: str
    details: List[str] = field(default_factory=list)
    details_heading: Optional[str] = None
    note: Optional[str] = None

    # Timestamp shown in the badge ("Last updated" wins over "Generated")
    timestamp: Optional[datetime] = None
    timestamp_label: Optional[str] = None
    formatted_timestamp: Optional[str] = None

    comparables_count: Optional[int] = None
    count_label: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "source": self.source.value,
            "label": self.label,
            "shortLabel": self.short_label,
            "color": self.color,
            "bgColor": self.bg_color,
            "borderColor": self.border_color,
            "description": self.description,
            "details": list(self.details),
            "detailsHeading": self.details_heading,
            "note": self.note,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "timestampLabel": self.timestamp_label,
            "formattedTimestamp": self.formatted_timestamp,
            "comparablesCount": self.comparables_count,
            "countLabel": self.count_label,
        }


def resolve_source(source: Union[CompSource, str, None]) -> CompSource:
    """Map a stored source tag onto a known source, defaulting to MLS."""
    if isinstance(source, CompSource):
        return source
    return CompSource.from_string(source) or DEFAULT_SOURCE


def parse_timestamp(value: TimestampInput) -> Optional[datetime]:
    """Parse a datetime or ISO-8601 string; unparseable values give None."""
    if value is None or isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_timestamp(value: datetime) -> str:
    """Format as e.g. "Jan 5, 2024 at 3:07 PM"."""
    hour = value.hour % 12 or 12
    return f"{value:%b} {value.day}, {value.year} at {hour}:{value:%M} {value:%p}"


def describe_source(
    source: Union[CompSource, str, None],
    generated_at: TimestampInput = None,
    last_updated_at: TimestampInput = None,
    comparables_count: Optional[int] = None,
) -> SourceDescriptor:
    """
    Build the provenance descriptor for a comparable set.

    Args:
        source: Stored source tag (unrecognised tags fall back to MLS)
        generated_at: When the set was first generated
        last_updated_at: When the set was last edited
        comparables_count: Number of comparables in the set

    Returns:
        SourceDescriptor with labels, styling tokens and detail lines
    """
    kind = resolve_source(source)
    config = SOURCE_CONFIG[kind]

    generated = parse_timestamp(generated_at)
    updated = parse_timestamp(last_updated_at)
    shown = updated or generated

    timestamp_label = None
    formatted = None
    if shown is not None:
        timestamp_label = "Last updated:" if updated else "Generated:"
        formatted = format_timestamp(shown)

    count_label = None
    if comparables_count is not None:
        plural = "" if comparables_count == 1 else "s"
        count_label = f"{comparables_count} comparable{plural} found"

    return SourceDescriptor(
        source=kind,
        label=config["label"],
        short_label=config["short_label"],
        color=config["color"],
        bg_color=config["bg_color"],
        border_color=config["border_color"],
        description=config["description"],
        details=list(config["details"]),
        details_heading=config["details_heading"],
        note=config["note"],
        timestamp=shown,
        timestamp_label=timestamp_label,
        formatted_timestamp=formatted,
        comparables_count=comparables_count,
        count_label=count_label,
    )
