"""
Shared data models for the Yorisoi Relay service.

This module defines the core domain models used across multiple layers
of the application (business logic, CLI, API).
"""

from pydantic import BaseModel, ConfigDict, Field


class DomainTag(BaseModel):
    """An ICF functioning-domain tag attached to a message."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., description="ICF classification code")
    label: str = Field(..., description="Human readable domain label")


class ScorePoint(BaseModel):
    """A single entry in the sentiment score history."""

    time: int = Field(..., description="Epoch milliseconds when the score was recorded")
    score: int = Field(..., ge=0, le=100, description="Sentiment score after the update")


class ChatReply(BaseModel):
    """The assembled result of handling one chat message."""

    text: str = Field(..., description="Response text shown to the user")
    audio: str = Field(..., description="Base64 encoded speech audio of the text")
    danger: bool = Field(..., description="Whether crisis keywords were detected")
    score: int = Field(..., description="Sentiment score after this message")
    icf: list[DomainTag] = Field(
        default_factory=list, description="ICF tags detected in the message"
    )
