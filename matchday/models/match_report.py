"""Dataclasses representing match summary reports."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class TimelineEntry:
    """One row of the printed timeline."""

    event_id: str
    kind: str
    match_time_seconds: int
    minute: str
    half: str
    description: str


@dataclass
class PlayerTally:
    """Per-player contributions within one match."""

    player_id: str
    goals: int = 0
    assists: int = 0
    yellow_cards: int = 0
    red_cards: int = 0
    penalties_scored: int = 0
    subbed_on: bool = False
    subbed_off: bool = False
    time_on_pitch_seconds: int = 0
    time_off_pitch_seconds: int = 0


@dataclass
class MatchReport:
    """Summary of a match snapshot for the summary screen and exports."""

    match_id: str
    opposition: str
    location: str
    match_format: str
    match_date: Optional[str]
    phase: str
    result: str
    score_for: int
    score_against: int
    elapsed_seconds: int
    total_time: str
    half_summary: str
    card_counts: Dict[str, int] = field(default_factory=dict)
    players: List[PlayerTally] = field(default_factory=list)
    first_half: List[TimelineEntry] = field(default_factory=list)
    second_half: List[TimelineEntry] = field(default_factory=list)
