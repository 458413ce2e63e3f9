"""Payload shapes served by the statistics API.

These are documentation types only: the cache stores whatever JSON the API
returns and never validates rows against them.
"""

from __future__ import annotations

from typing import TypedDict


class NumericRange(TypedDict):
    min: float
    max: float


class CorporationPlayerStatsRow(TypedDict, total=False):
    """One player's result with one corporation in one game."""

    corporation: str
    tableId: int
    playerCount: int
    map: str
    gameMode: str
    gameSpeed: str
    durationMinutes: int
    generations: int
    finalScore: int
    finalTr: int
    playerId: int
    playerName: str
    elo: int
    eloChange: int
    position: int


class ProjectCardStatsRow(TypedDict, total=False):
    card: str
    timesPlayed: int
    winRate: float
    avgElo: float
    avgEloChange: float


class PreludeStatsRow(TypedDict, total=False):
    card: str
    timesPlayed: int
    winRate: float
    avgElo: float
    avgEloChange: float


class AwardRow(TypedDict, total=False):
    """A funded award and the placement of one player in it."""

    tableId: int
    map: str
    gameMode: str
    gameSpeed: str
    playerCount: int
    award: str
    fundedBy: int
    fundedGen: int
    playerId: int
    playerName: str
    elo: int
    eloChange: int
    position: int
    playerPlace: int


class MilestoneClaimRow(TypedDict, total=False):
    tableId: int
    map: str
    gameMode: str
    gameSpeed: str
    playerCount: int
    milestone: str
    claimedGen: int
    playerId: int
    playerName: str
    elo: int
    eloChange: int
    position: int
    corporation: str


class CorporationFilterOptions(TypedDict):
    """Distinct filter values, small enough to fetch without the row data."""

    maps: list[str]
    gameModes: list[str]
    gameSpeeds: list[str]
    playerCounts: list[int]
    eloRange: NumericRange
    generationsRange: NumericRange


class PreludeFilterOptions(CorporationFilterOptions):
    corporations: list[str]


class AwardsFilterOptions(TypedDict):
    fundedGenRange: NumericRange
    corporations: list[str]


class MilestonesFilterOptions(TypedDict, total=False):
    claimedGenRange: NumericRange
    corporations: list[str]
