"""
Moderation Data Models

Payload and metadata types exchanged by the moderation plugins.
"""

from datetime import datetime
from pydantic import BaseModel, Field


# Overall scores below APPROVE_THRESHOLD are approved, scores below
# REVIEW_THRESHOLD are flagged for review, anything higher is rejected.
APPROVE_THRESHOLD = 0.3
REVIEW_THRESHOLD = 0.7


class Content(BaseModel):
    """User-generated content; the payload at the start of the moderation pipeline."""

    id: str
    text: str
    author_id: str = "anonymous"
    timestamp: datetime = Field(default_factory=datetime.now)


class ModerationScore(BaseModel):
    """Individual check scores and their weighted aggregate, each in [0, 1]."""

    profanity_score: float = 0.0
    spam_score: float = 0.0
    toxicity_score: float = 0.0
    overall_score: float = 0.0


class ModerationDecision(BaseModel):
    """Action taken for a piece of content: approve, review or reject."""

    action: str
    score: ModerationScore
    reason: str
    flagged: bool


class ModerationResult(BaseModel):
    """Final payload of the moderation pipeline."""

    content: Content
    decision: ModerationDecision
