"""Turn boundary models shared by the state machine and the transport."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TurnResult(BaseModel):
    """Outcome of one user turn."""

    model_config = ConfigDict(populate_by_name=True)

    reply: str
    options: list[str] = Field(default_factory=list)
    show_progress_bar: bool = Field(default=False, alias="showProgressBar")
    tasks_completed: bool = Field(default=False, alias="tasksCompleted")


class EndSessionResult(BaseModel):
    """Summary emitted when a participant leaves for the questionnaire."""

    user_id: str
    duration_seconds: float
    summary: str


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = ""
    user_id: str = Field(default="default", alias="userId")


class EndSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")
    session_end: Optional[bool] = Field(default=None, alias="sessionEnd")
