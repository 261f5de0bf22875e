"""UI actions accepted by Session.dispatch."""

from dataclasses import dataclass

from incidentglobe.models import ColorMode, Organization, TooltipSection


@dataclass(frozen=True)
class Advance:
    pass


@dataclass(frozen=True)
class Retreat:
    pass


@dataclass(frozen=True)
class GoTo:
    index: int


@dataclass(frozen=True)
class Play:
    pass


@dataclass(frozen=True)
class Pause:
    pass


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class Scrub:
    year: int


@dataclass(frozen=True)
class ToggleOrganization:
    org: Organization


@dataclass(frozen=True)
class SelectAllOrganizations:
    pass


@dataclass(frozen=True)
class ClearOrganizations:
    pass


@dataclass(frozen=True)
class SetYearRange:
    min_year: int
    max_year: int


@dataclass(frozen=True)
class SetColorMode:
    mode: ColorMode


@dataclass(frozen=True)
class ToggleSection:
    section: TooltipSection


@dataclass(frozen=True)
class Hover:
    u: float
    v: float


@dataclass(frozen=True)
class ClearHover:
    pass


@dataclass(frozen=True)
class SetHoverRadius:
    """Fixed UV query radius; ``None`` goes back to the configured radius."""
    radius: float | None


Action = (
    Advance | Retreat | GoTo | Play | Pause | Tick | Scrub
    | ToggleOrganization | SelectAllOrganizations | ClearOrganizations
    | SetYearRange | SetColorMode | ToggleSection
    | Hover | ClearHover | SetHoverRadius
)
