from pydantic import BaseModel, Field, model_validator


class GameRules(BaseModel):
    board_size: int = Field(150, gt=1)
    starting_position: int = Field(1, ge=1)
    dice_min: int = Field(1, ge=1)
    dice_max: int = 6
    hint_penalty_seconds: int = Field(60, ge=0)
    snake_penalty_seconds: int = Field(180, ge=0)
    coding_question_probability: float = Field(0.3, ge=0.0, le=1.0)
    auto_marked_types: list[str] = Field(default_factory=lambda: ["NUMERICAL", "MCQ"])

    @model_validator(mode="after")
    def check_ranges(self) -> "GameRules":
        if self.dice_max < self.dice_min:
            raise ValueError("dice_max must be >= dice_min")
        if self.starting_position >= self.board_size:
            raise ValueError("starting_position must be below board_size")
        return self


class AuthRules(BaseModel):
    token_ttl_minutes: int = Field(1440, gt=0)
    single_session: bool = True


class RbacRules(BaseModel):
    roles: dict[str, list[str]]


class RateLimitWindow(BaseModel):
    window_seconds: int = Field(gt=0)
    max_requests: int = Field(ge=0)


class RateLimitRules(BaseModel):
    auth: RateLimitWindow
    api: RateLimitWindow


class CacheRules(BaseModel):
    leaderboard_ttl_seconds: int = Field(8, ge=0)
    board_ttl_seconds: int = Field(300, ge=0)


class SyncRules(BaseModel):
    interval_seconds: int = Field(10, gt=0)
    run_seconds: int = Field(22, gt=0)


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    game: GameRules
    auth: AuthRules
    rbac: RbacRules
    rate_limits: RateLimitRules
    cache: CacheRules
    sync: SyncRules
    ops: OpsRules
