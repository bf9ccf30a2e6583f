"""
Moderation Plugins

Heuristic content moderation checks. The expected order is::

    ProfanityFilterPlugin → SpamDetectorPlugin → SentimentAnalyzerPlugin
        → ScoringPlugin → DecisionRouterPlugin → ActionHandlerPlugin

The three checks read a Content payload and each publish a score in
metadata. ScoringPlugin combines them into ``moderation_score``,
DecisionRouterPlugin turns that into ``moderation_decision`` and
ActionHandlerPlugin replaces the payload with a ModerationResult.

The checks do not depend on each other, so they can also run under the
continue-on-error strategy: a failing check leaves its score absent and
ScoringPlugin counts it as zero.
"""

import re
import string
from typing import Iterable, Optional, Tuple

from plugpipe.core.config.models import DEFAULT_PROFANITY_WORDS
from plugpipe.core.pipeline import Plugin, PluginContext
from .models import (
    APPROVE_THRESHOLD, REVIEW_THRESHOLD,
    Content, ModerationDecision, ModerationResult, ModerationScore,
)


DEFAULT_POSITIVE_WORDS = (
    "good", "great", "excellent", "amazing", "wonderful",
    "love", "happy", "fantastic", "awesome", "perfect",
)

DEFAULT_NEGATIVE_WORDS = (
    "bad", "terrible", "awful", "horrible", "hate",
    "angry", "sad", "disgusting", "worst", "pathetic",
)

LINK_PATTERN = re.compile(r"https?://\S+")
REPEATED_CHAR_PATTERN = re.compile(r"(.)\1{4}", re.DOTALL)


def _read_score(context: PluginContext, key: str) -> float:
    value = context.get(key)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return 0.0


class ProfanityFilterPlugin(Plugin):
    """Scores profanity: 0.2 per listed word found in the text, capped at 1.0."""

    def __init__(self, words: Optional[Iterable[str]] = None):
        self.words = tuple(word.lower() for word in (words if words is not None else DEFAULT_PROFANITY_WORDS))

    def execute(self, context: PluginContext) -> None:
        content = context.expect_data(Content)
        text = content.text.lower()

        match_count = sum(1 for word in self.words if word in text)
        context.set("profanity_score", min(match_count * 0.2, 1.0))


class SpamDetectorPlugin(Plugin):
    """
    Scores spam patterns, capped at 1.0.

    - more than three links: +0.5, two or three links: +0.2
    - a character repeated five times in a row: +0.3
    - more than half of the characters are uppercase ASCII letters: +0.3
    """

    def execute(self, context: PluginContext) -> None:
        content = context.expect_data(Content)
        text = content.text
        score = 0.0

        links = LINK_PATTERN.findall(text)
        if len(links) > 3:
            score += 0.5
        elif len(links) > 1:
            score += 0.2

        if REPEATED_CHAR_PATTERN.search(text):
            score += 0.3

        if text:
            upper_count = sum(1 for ch in text if ch in string.ascii_uppercase)
            if upper_count / len(text) > 0.5:
                score += 0.3

        context.set("spam_score", min(score, 1.0))


class SentimentAnalyzerPlugin(Plugin):
    """
    Lexicon based sentiment analysis.

    Sentiment is ``(positive - negative) / words * 10`` clamped to [-1, 1].
    Sentiment below -0.3 is reported as toxicity (its magnitude); anything
    else has zero toxicity. Publishes ``sentiment_score`` and
    ``toxicity_score``.
    """

    def __init__(self, positive_words: Optional[Iterable[str]] = None,
                 negative_words: Optional[Iterable[str]] = None):
        self.positive_words = frozenset(positive_words if positive_words is not None else DEFAULT_POSITIVE_WORDS)
        self.negative_words = frozenset(negative_words if negative_words is not None else DEFAULT_NEGATIVE_WORDS)

    def analyze(self, text: str) -> Tuple[float, float]:
        words = text.lower().split()

        positive = 0
        negative = 0
        for word in words:
            clean = word.strip(".,!?;:")
            if clean in self.positive_words:
                positive += 1
            if clean in self.negative_words:
                negative += 1

        sentiment = 0.0
        if words:
            sentiment = max(-1.0, min(1.0, (positive - negative) / len(words) * 10))

        toxicity = min(-sentiment, 1.0) if sentiment < -0.3 else 0.0
        return sentiment, toxicity

    def execute(self, context: PluginContext) -> None:
        content = context.expect_data(Content)
        sentiment, toxicity = self.analyze(content.text)
        context.set("sentiment_score", sentiment)
        context.set("toxicity_score", toxicity)


class ScoringPlugin(Plugin):
    """Combines the individual scores into a weighted ``moderation_score``."""

    def __init__(self, profanity_weight: float = 0.4, spam_weight: float = 0.3,
                 toxicity_weight: float = 0.3):
        self.profanity_weight = profanity_weight
        self.spam_weight = spam_weight
        self.toxicity_weight = toxicity_weight

    def execute(self, context: PluginContext) -> None:
        profanity = _read_score(context, "profanity_score")
        spam = _read_score(context, "spam_score")
        toxicity = _read_score(context, "toxicity_score")

        overall = (
            profanity * self.profanity_weight
            + spam * self.spam_weight
            + toxicity * self.toxicity_weight
        )

        context.set("moderation_score", ModerationScore(
            profanity_score=profanity,
            spam_score=spam,
            toxicity_score=toxicity,
            overall_score=overall,
        ))


class DecisionRouterPlugin(Plugin):
    """Maps the overall score onto approve, review or reject."""

    def __init__(self, approve_threshold: float = APPROVE_THRESHOLD,
                 review_threshold: float = REVIEW_THRESHOLD):
        self.approve_threshold = approve_threshold
        self.review_threshold = review_threshold

    def decide(self, score: ModerationScore) -> ModerationDecision:
        if score.overall_score < self.approve_threshold:
            return ModerationDecision(action="approve", score=score,
                                      reason="Content meets quality standards", flagged=False)
        if score.overall_score < self.review_threshold:
            return ModerationDecision(action="review", score=score,
                                      reason="Content requires manual review", flagged=True)
        return ModerationDecision(action="reject", score=score,
                                  reason="Content violates community guidelines", flagged=True)

    def execute(self, context: PluginContext) -> None:
        score = context.expect_metadata("moderation_score", ModerationScore)
        decision = self.decide(score)
        self.logger.info(f"Moderation decision: {decision.action} (score={score.overall_score:.2f})")
        context.set("moderation_decision", decision)


class ActionHandlerPlugin(Plugin):
    """Replaces the Content payload with the final ModerationResult."""

    def execute(self, context: PluginContext) -> None:
        content = context.expect_data(Content)
        decision = context.expect_metadata("moderation_decision", ModerationDecision)
        context.set_data(ModerationResult(content=content, decision=decision))
