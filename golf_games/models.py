from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Conceded / picked up / did not finish. Never counts toward totals and is not 0.
NO_SCORE = -1
# Plus handicaps beyond +10 and indices above the 54.0 WHS ceiling are rejected.
MIN_HANDICAP = -10.0
MAX_HANDICAP = 54.0

GameFormat = Literal[
    "stroke_play",
    "match_play",
    "best_ball",
    "skins",
    "wolf",
    "copenhagen",
    "scramble",
    "umbriago",
]
MatchOutcome = Literal["WIN", "LOSS", "TIE"]
ShotType = Literal["tee", "approach", "putt"]
ShotCategory = Literal["putting", "long_game"]


class ScoringInputError(ValueError):
    pass


class HoleDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    hole_number: int = Field(ge=1, le=18)
    par: int = Field(ge=3, le=5)
    stroke_index: int = Field(ge=1, le=18)


class PlayerRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_id: str = Field(min_length=1)
    name: str
    handicap: Optional[float] = Field(default=None, ge=MIN_HANDICAP, le=MAX_HANDICAP)
    tee: Optional[str] = None


class TeamRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    team_id: str = Field(min_length=1)
    name: str
    players: list[PlayerRef] = Field(default_factory=list)
    handicap: Optional[float] = Field(default=None, ge=MIN_HANDICAP, le=MAX_HANDICAP)


class HoleScoreEntry(BaseModel):
    hole_number: int = Field(ge=1, le=18)
    scores: dict[str, Optional[int]] = Field(default_factory=dict)

    @field_validator("scores")
    @classmethod
    def _check_scores(cls, value: dict[str, Optional[int]]) -> dict[str, Optional[int]]:
        for player_id, score in value.items():
            if score is not None and score < NO_SCORE:
                raise ValueError(f"Invalid score {score} for {player_id}.")
        return value


class ShotRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: ShotType
    start_distance: float = Field(ge=0)
    start_lie: str = "fairway"
    holed: bool = False
    end_distance: Optional[float] = Field(default=None, ge=0)
    end_lie: Optional[str] = None
    strokes_gained: float = 0.0
    is_out_of_bounds: bool = False
    category: Optional[Literal["other", "scoring"]] = None

    @model_validator(mode="after")
    def _holed_has_no_end(self) -> "ShotRecord":
        if self.holed and (self.end_distance or self.end_lie):
            raise ValueError("A holed shot has no end distance or end lie.")
        return self


class ProStatsHole(BaseModel):
    hole_number: int = Field(ge=1, le=18)
    par: int = Field(default=4, ge=3, le=5)
    shots: list[ShotRecord] = Field(default_factory=list)


class ProStatsRound(BaseModel):
    round_id: str
    hole_count: int = Field(default=18, ge=1, le=18)
    holes: list[ProStatsHole] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Game requests
# ---------------------------------------------------------------------------


class _GameBase(BaseModel):
    game_id: Optional[str] = None
    holes: list[HoleDefinition] = Field(min_length=1, max_length=18)
    use_handicaps: bool = False
    scores: list[HoleScoreEntry] = Field(default_factory=list)


class StrokePlayGame(_GameBase):
    format: Literal["stroke_play"] = "stroke_play"
    players: list[PlayerRef] = Field(min_length=1)


class MatchPlayGame(_GameBase):
    format: Literal["match_play"] = "match_play"
    players: list[PlayerRef] = Field(min_length=2, max_length=2)
    allocation: Literal["difference", "full"] = "difference"


class BestBallGame(_GameBase):
    format: Literal["best_ball"] = "best_ball"
    teams: list[TeamRef] = Field(min_length=2, max_length=2)
    allocation: Literal["difference", "full"] = "full"


class SkinsGame(_GameBase):
    format: Literal["skins"] = "skins"
    players: list[PlayerRef] = Field(min_length=2)
    carryover_enabled: bool = True
    skin_value: float = Field(default=1.0, ge=0)


class WolfPayout(BaseModel):
    wolf: int = 0
    partner: int = 0
    opponent: int = 0


class WolfPointsRule(BaseModel):
    play: Literal["lone", "partner"]
    outcome: Literal["win", "loss", "tie"]
    opponents: Optional[int] = Field(default=None, ge=1)
    payout: WolfPayout


def _default_wolf_rules() -> list[WolfPointsRule]:
    return [
        WolfPointsRule(play="lone", outcome="win", payout=WolfPayout(wolf=3)),
        WolfPointsRule(play="lone", outcome="loss", payout=WolfPayout(opponent=1)),
        WolfPointsRule(play="lone", outcome="tie", payout=WolfPayout()),
        WolfPointsRule(play="partner", outcome="win", payout=WolfPayout(wolf=1, partner=1)),
        WolfPointsRule(play="partner", outcome="loss", payout=WolfPayout(opponent=1)),
        WolfPointsRule(play="partner", outcome="tie", payout=WolfPayout()),
    ]


class WolfPointsTable(BaseModel):
    rules: list[WolfPointsRule] = Field(default_factory=_default_wolf_rules)

    def lookup(self, play: str, outcome: str, opponents: int) -> WolfPayout:
        fallback: Optional[WolfPayout] = None
        for rule in self.rules:
            if rule.play != play or rule.outcome != outcome:
                continue
            if rule.opponents == opponents:
                return rule.payout
            if rule.opponents is None and fallback is None:
                fallback = rule.payout
        return fallback or WolfPayout()


class WolfHoleDecision(BaseModel):
    hole_number: int = Field(ge=1, le=18)
    wolf_id: Optional[str] = None
    partner_id: Optional[str] = None
    multiplier: Literal[1, 2, 4] = 1


class WolfGame(_GameBase):
    format: Literal["wolf"] = "wolf"
    players: list[PlayerRef] = Field(min_length=3, max_length=6)
    wolf_position: Literal["first", "last"] = "first"
    decisions: list[WolfHoleDecision] = Field(default_factory=list)
    points_table: WolfPointsTable = Field(default_factory=WolfPointsTable)


class PressRequest(BaseModel):
    id: Optional[str] = None
    start_hole: int = Field(ge=0, le=18)
    initiating_player_index: int = Field(ge=1, le=3)


class CopenhagenGame(_GameBase):
    format: Literal["copenhagen"] = "copenhagen"
    players: list[PlayerRef] = Field(min_length=3, max_length=3)
    presses: list[PressRequest] = Field(default_factory=list)
    sweep_margin: int = Field(default=1, ge=1)
    sweep_requires_birdie: bool = True
    press_requires_trailing: bool = True


class ScrambleGame(_GameBase):
    format: Literal["scramble"] = "scramble"
    teams: list[TeamRef] = Field(min_length=1)
    scoring_type: Literal["gross", "net"] = "gross"


class UmbriagoHoleInput(BaseModel):
    hole_number: int = Field(ge=1, le=18)
    closest_to_pin: Optional[str] = None
    multiplier: Literal[1, 2, 4] = 1


class UmbriagoRoll(BaseModel):
    team_id: str
    hole_number: int = Field(ge=1, le=18)


class UmbriagoGame(_GameBase):
    format: Literal["umbriago"] = "umbriago"
    teams: list[TeamRef] = Field(min_length=2, max_length=2)
    hole_inputs: list[UmbriagoHoleInput] = Field(default_factory=list)
    rolls: list[UmbriagoRoll] = Field(default_factory=list)
    stake_per_point: float = Field(default=1.0, ge=0)
    payout_mode: Literal["difference", "total"] = "difference"


GameRequest = Annotated[
    Union[
        StrokePlayGame,
        MatchPlayGame,
        BestBallGame,
        SkinsGame,
        WolfGame,
        CopenhagenGame,
        ScrambleGame,
        UmbriagoGame,
    ],
    Field(discriminator="format"),
]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class SideSummary(BaseModel):
    side_id: str
    name: str
    player_ids: list[str]


class StrokePlayHoleResult(BaseModel):
    hole_number: int
    par: int
    gross: dict[str, Optional[int]]
    net: dict[str, Optional[int]]
    is_resolved: bool


class StrokePlayStanding(BaseModel):
    participant_id: str
    name: str
    position: Optional[str] = None
    holes_completed: int = 0
    gross_total: int = 0
    net_total: int = 0
    to_par: int = 0
    incomplete_holes: list[int] = Field(default_factory=list)


class StrokePlayResult(BaseModel):
    format: Literal["stroke_play"] = "stroke_play"
    scoring_type: Literal["gross", "net"] = "gross"
    holes: list[StrokePlayHoleResult]
    standings: list[StrokePlayStanding]
    holes_played: int
    is_complete: bool
    leader_ids: list[str] = Field(default_factory=list)


class MatchPlayHoleResult(BaseModel):
    hole_number: int
    par: int
    gross: dict[str, Optional[int]]
    net: dict[str, Optional[int]]
    side_a_score: Optional[int] = None
    side_b_score: Optional[int] = None
    side_a_counting: Optional[str] = None
    side_b_counting: Optional[str] = None
    hole_result: Optional[int] = None
    counts: bool = False
    match_status_after: int = 0
    holes_remaining_after: int = 0
    status_text: str = "AS"


class MatchPlayResult(BaseModel):
    format: Literal["match_play", "best_ball"]
    side_a: SideSummary
    side_b: SideSummary
    holes: list[MatchPlayHoleResult]
    match_status: int
    holes_played: int
    holes_remaining: int
    is_decided: bool
    decided_on_hole: Optional[int] = None
    is_dormie: bool
    is_finished: bool
    status_text: str
    final_result: Optional[str] = None
    outcome_a: Optional[MatchOutcome] = None
    outcome_b: Optional[MatchOutcome] = None
    winner_side_id: Optional[str] = None
    status_history: list[int] = Field(default_factory=list)


class SkinsHoleResult(BaseModel):
    hole_number: int
    par: int
    scores: dict[str, Optional[int]]
    is_resolved: bool
    skins_available: int
    winner_id: Optional[str] = None
    skins_won: int = 0
    is_carryover: bool = False
    is_forfeited: bool = False


class SkinsLeaderboardEntry(BaseModel):
    player_id: str
    name: str
    skins_won: int
    total_value: float
    holes_won: list[int]


class SkinsResult(BaseModel):
    format: Literal["skins"] = "skins"
    holes: list[SkinsHoleResult]
    leaderboard: list[SkinsLeaderboardEntry]
    total_skins_awarded: int
    final_carryover: int
    skins_forfeited: int
    holes_played: int
    is_complete: bool
    leader_ids: list[str] = Field(default_factory=list)


class WolfHoleResult(BaseModel):
    hole_number: int
    par: int
    wolf_id: str
    partner_id: Optional[str] = None
    play: Optional[Literal["lone", "partner"]] = None
    scores: dict[str, Optional[int]]
    is_resolved: bool
    winning_side: Optional[Literal["wolf", "opponents", "tie"]] = None
    multiplier: int = 1
    hole_points: dict[str, int]
    running_totals: dict[str, int]


class WolfResult(BaseModel):
    format: Literal["wolf"] = "wolf"
    holes: list[WolfHoleResult]
    total_points: dict[str, int]
    holes_played: int
    is_complete: bool
    leader_ids: list[str] = Field(default_factory=list)


class CopenhagenHoleResult(BaseModel):
    hole_number: int
    par: int
    gross: list[Optional[int]]
    net: list[Optional[int]]
    is_resolved: bool
    points: list[int]
    is_sweep: bool = False
    sweep_winner: Optional[int] = None
    running_totals: list[int]
    press_points: dict[str, list[int]] = Field(default_factory=dict)


class PressResult(BaseModel):
    id: str
    start_hole: int
    initiating_player_index: int
    is_active: bool
    points: list[int]
    leader_indexes: list[int] = Field(default_factory=list)


class CopenhagenResult(BaseModel):
    format: Literal["copenhagen"] = "copenhagen"
    player_ids: list[str]
    holes: list[CopenhagenHoleResult]
    total_points: list[int]
    normalized_points: list[int]
    differentials: list[float]
    presses: list[PressResult]
    sweeps: int
    holes_played: int
    is_complete: bool
    leader_ids: list[str] = Field(default_factory=list)


class UmbriagoHoleResult(BaseModel):
    hole_number: int
    par: int
    scores: dict[str, Optional[int]]
    is_resolved: bool
    team_low_winner: Optional[str] = None
    individual_low_winner: Optional[str] = None
    closest_to_pin_winner: Optional[str] = None
    birdies: dict[str, int] = Field(default_factory=dict)
    is_umbriago: bool = False
    multiplier: int = 1
    team_points: dict[str, int] = Field(default_factory=dict)
    running_totals: dict[str, int] = Field(default_factory=dict)


class UmbriagoRollResult(BaseModel):
    team_id: str
    hole_number: int
    points_before: dict[str, int]
    points_after: dict[str, int]
    stake_after: float


class UmbriagoResult(BaseModel):
    format: Literal["umbriago"] = "umbriago"
    teams: list[SideSummary]
    holes: list[UmbriagoHoleResult]
    total_points: dict[str, int]
    rolls: list[UmbriagoRollResult]
    stake_per_point: float
    winner_team_id: Optional[str] = None
    payout: float = 0.0
    holes_played: int
    is_complete: bool
    leader_ids: list[str] = Field(default_factory=list)


class ScrambleResult(StrokePlayResult):
    format: Literal["scramble"] = "scramble"  # type: ignore[assignment]


GameResult = Annotated[
    Union[
        StrokePlayResult,
        MatchPlayResult,
        SkinsResult,
        WolfResult,
        CopenhagenResult,
        ScrambleResult,
        UmbriagoResult,
    ],
    Field(discriminator="format"),
]


class ScoringOutcome(BaseModel):
    ok: bool
    result: Optional[GameResult] = None
    error: Optional[str] = None


# ---------------------------------------------------------------------------
# Strokes gained
# ---------------------------------------------------------------------------


class ShotRequest(BaseModel):
    type: ShotType
    start_distance: float
    start_lie: str = "fairway"
    holed: bool = False
    end_distance: Optional[float] = None
    end_lie: Optional[str] = None
    is_out_of_bounds: bool = False


class CategoryStrokesGained(BaseModel):
    total: Optional[float] = None
    off_the_tee: Optional[float] = None
    approach: Optional[float] = None
    short_game: Optional[float] = None
    putting: Optional[float] = None
    other: Optional[float] = None
    scoring: Optional[float] = None


class DistanceBandStat(BaseModel):
    category: Literal["putting", "long_game"]
    band: str
    lie: Optional[str] = None
    shots: int
    total: float
    average: float


class StrokesGainedRollup(BaseModel):
    rounds_total: int
    complete_rounds: int
    per_round: CategoryStrokesGained
    bands: list[DistanceBandStat]


class GameSummary(BaseModel):
    format: GameFormat
    holes_total: int
    holes_played: int
    is_complete: bool
    leader_ids: list[str]
    totals: dict[str, float]
    series: dict[str, list[float]]
