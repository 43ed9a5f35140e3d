from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field


class Stage(StrEnum):
    landing = "landing"
    terminal = "terminal"
    constellation = "constellation"
    maze = "maze"
    finale = "finale"
    celebration = "celebration"


class Choice(StrEnum):
    yes = "yes"
    absolutely = "absolutely"


class CampaignState(BaseModel):
    """Top-level campaign record. Only the stage machine moves `stage`."""

    stage: Stage = Stage.landing
    choice: Choice | None = None
    created_at: datetime
    last_updated_at: datetime

    # Konami code unlocks; orthogonal to stage progress.
    secrets_found: int = 0


# Requests


class CommandRequest(BaseModel):
    text: str = Field(..., max_length=500)


class MoveRequest(BaseModel):
    direction: Literal["up", "down", "left", "right"]


class KeyRequest(BaseModel):
    key: str = Field(..., min_length=1, max_length=32)


class ChoiceRequest(BaseModel):
    choice: Choice


# Views


class TerminalView(BaseModel):
    lines: list[str]
    decoded_files: list[str]
    tracked_files: list[str]
    completed: bool


class StarView(BaseModel):
    id: int
    x: int
    y: int
    selected: bool


class ConstellationView(BaseModel):
    stars: list[StarView]
    selected: list[int]
    revealed_words: list[str]
    message: str
    segments: list[tuple[int, int]]
    incorrect_attempts: int
    hint_enabled: bool
    hint: str | None = None
    # Only exposed while the hint is on.
    next_expected: int | None = None
    total_steps: int
    completed: bool


class MazeView(BaseModel):
    grid: list[list[int]]
    position: tuple[int, int]
    visited: list[tuple[int, int]]
    collected: list[tuple[int, int]]
    total_collectibles: int
    completed: bool


class FinaleView(BaseModel):
    bloomed: list[int]
    question_visible: bool


class CampaignView(BaseModel):
    stage: Stage
    choice: Choice | None = None
    headline: str | None = None
    secrets_found: int = 0
    terminal: TerminalView | None = None
    constellation: ConstellationView | None = None
    maze: MazeView | None = None
    finale: FinaleView | None = None


class SubmitResponse(BaseModel):
    output_lines: list[str]
    completed: bool
    cleared: bool
    campaign: CampaignView


class SelectionResponse(BaseModel):
    outcome: str
    word: str | None = None
    campaign: CampaignView


class MoveResponse(BaseModel):
    outcome: str
    position: tuple[int, int]
    message: str | None = None
    campaign: CampaignView


class KeyResponse(BaseModel):
    secret_unlocked: bool
    move: str | None = None
    campaign: CampaignView
