"""Resource catalogue and the remote fetch for each cached endpoint."""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from .api import ApiClient, ApiError
from .models.resource_spec import ResourceSpec
from .models.stats import (
    AwardRow,
    AwardsFilterOptions,
    CorporationFilterOptions,
    CorporationPlayerStatsRow,
    MilestoneClaimRow,
    MilestonesFilterOptions,
    PreludeFilterOptions,
    PreludeStatsRow,
    ProjectCardStatsRow,
)

__all__ = [
    "RESOURCES",
    "CARD_MODES",
    "FETCHERS",
    "get_spec",
    "fetch_corporation_stats",
    "fetch_corporation_filter_options",
    "fetch_project_card_stats",
    "fetch_project_card_option_stats",
    "fetch_prelude_stats",
    "fetch_prelude_filter_options",
    "fetch_award_rows",
    "fetch_awards_filter_options",
    "fetch_milestone_claim_rows",
    "fetch_milestones_filter_options",
]

CORPORATIONS = ResourceSpec(
    "corporations",
    "corp",
    "all",
    1,
    "/api/corporations/playerstats",
    description="per-player corporation results",
)
CORPORATION_OPTIONS = ResourceSpec(
    "corporations-options",
    "corp",
    "options",
    1,
    "/api/corporations/options",
    family="options",
    description="corporation filter values",
)
CARDS = ResourceSpec(
    "cards",
    "cards",
    "all",
    1,
    "/api/cards/stats",
    description="project card stats (played)",
)
CARD_OPTION_STATS = ResourceSpec(
    "cards-option",
    "cards",
    "option",
    1,
    "/api/cards/option-stats",
    description="project card stats (offered as an option)",
)
PRELUDES = ResourceSpec(
    "preludes",
    "preludes",
    "all",
    1,
    "/api/preludes/stats",
    description="prelude stats",
)
PRELUDE_OPTIONS = ResourceSpec(
    "preludes-options",
    "prelude",
    "options",
    1,
    "/api/preludes/options",
    family="options",
    description="prelude filter values",
)
AWARDS = ResourceSpec(
    "awards",
    "award",
    "rows",
    2,
    "/api/awards/rows",
    description="funded award rows",
)
AWARD_OPTIONS = ResourceSpec(
    "awards-options",
    "awards",
    "options",
    1,
    "/api/awards/options",
    family="options",
    description="award filter values",
)
MILESTONES = ResourceSpec(
    "milestones",
    "milestone",
    "claims",
    1,
    "/api/milestones/claims",
    description="milestone claim rows",
)
MILESTONE_OPTIONS = ResourceSpec(
    "milestones-options",
    "milestones",
    "options",
    1,
    "/api/milestones/options",
    family="options",
    description="milestone filter values",
)

RESOURCES: tuple[ResourceSpec, ...] = (
    CORPORATIONS,
    CORPORATION_OPTIONS,
    CARDS,
    CARD_OPTION_STATS,
    PRELUDES,
    PRELUDE_OPTIONS,
    AWARDS,
    AWARD_OPTIONS,
    MILESTONES,
    MILESTONE_OPTIONS,
)

# Project card stats come in two flavours sharing one table layout.
CARD_MODES: dict[str, ResourceSpec] = {
    "played": CARDS,
    "option": CARD_OPTION_STATS,
}

_BY_NAME = {spec.name: spec for spec in RESOURCES}


def get_spec(name: str) -> ResourceSpec:
    try:
        return _BY_NAME[name]
    except KeyError:
        raise KeyError(
            f"Unknown resource {name!r}; expected one of {', '.join(_BY_NAME)}"
        ) from None


async def _fetch_collection(client: ApiClient, spec: ResourceSpec) -> list[Any]:
    data = await client.get_json(spec.path)
    if not isinstance(data, list):
        raise ApiError(
            f"Expected a JSON array from {spec.path}, got {type(data).__name__}"
        )
    return data


async def _fetch_options(client: ApiClient, spec: ResourceSpec) -> dict[str, Any]:
    data = await client.get_json(spec.path)
    if not isinstance(data, dict):
        raise ApiError(
            f"Expected a JSON object from {spec.path}, got {type(data).__name__}"
        )
    return data


async def fetch_corporation_stats(client: ApiClient) -> list[CorporationPlayerStatsRow]:
    return await _fetch_collection(client, CORPORATIONS)


async def fetch_corporation_filter_options(
    client: ApiClient,
) -> CorporationFilterOptions:
    return await _fetch_options(client, CORPORATION_OPTIONS)


async def fetch_project_card_stats(client: ApiClient) -> list[ProjectCardStatsRow]:
    return await _fetch_collection(client, CARDS)


async def fetch_project_card_option_stats(
    client: ApiClient,
) -> list[ProjectCardStatsRow]:
    return await _fetch_collection(client, CARD_OPTION_STATS)


async def fetch_prelude_stats(client: ApiClient) -> list[PreludeStatsRow]:
    return await _fetch_collection(client, PRELUDES)


async def fetch_prelude_filter_options(client: ApiClient) -> PreludeFilterOptions:
    return await _fetch_options(client, PRELUDE_OPTIONS)


async def fetch_award_rows(client: ApiClient) -> list[AwardRow]:
    return await _fetch_collection(client, AWARDS)


async def fetch_awards_filter_options(client: ApiClient) -> AwardsFilterOptions:
    return await _fetch_options(client, AWARD_OPTIONS)


async def fetch_milestone_claim_rows(client: ApiClient) -> list[MilestoneClaimRow]:
    return await _fetch_collection(client, MILESTONES)


async def fetch_milestones_filter_options(
    client: ApiClient,
) -> MilestonesFilterOptions:
    return await _fetch_options(client, MILESTONE_OPTIONS)


FETCHERS: dict[str, Callable[[ApiClient], Awaitable[Any]]] = {
    CORPORATIONS.name: fetch_corporation_stats,
    CORPORATION_OPTIONS.name: fetch_corporation_filter_options,
    CARDS.name: fetch_project_card_stats,
    CARD_OPTION_STATS.name: fetch_project_card_option_stats,
    PRELUDES.name: fetch_prelude_stats,
    PRELUDE_OPTIONS.name: fetch_prelude_filter_options,
    AWARDS.name: fetch_award_rows,
    AWARD_OPTIONS.name: fetch_awards_filter_options,
    MILESTONES.name: fetch_milestone_claim_rows,
    MILESTONE_OPTIONS.name: fetch_milestones_filter_options,
}
