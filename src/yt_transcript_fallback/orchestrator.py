"""
orchestrator.py — Run strategies in priority order; first success wins.

State machine:

    TryingStrategy(0) ──non-empty──▶ Succeeded
          │ empty / raised
          ▼
    TryingStrategy(1) ──non-empty──▶ Succeeded
          │
          ⋮
          ▼
       AllFailed  ──▶ NoCaptionsAvailableError(attempts, languages)

Strictly sequential: no retries of the same strategy, nothing runs in
parallel, and strategies after the winner are never invoked.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from yt_transcript_fallback.errors import NoCaptionsAvailableError
from yt_transcript_fallback.logging import logger
from yt_transcript_fallback.models import CaptionTrack, ExtractionResult, StrategyAttempt


class Strategy(Protocol):
    """What the orchestrator needs from a strategy."""

    name: str

    def try_extract(self, video_id: str, language: str = "en") -> ExtractionResult: ...


@dataclass
class OrchestrationOutcome:
    """The winning result plus the attempts that led to it."""
    result: ExtractionResult
    attempts: list[StrategyAttempt] = field(default_factory=list)


def _merge_languages(known: list[CaptionTrack], found: list[CaptionTrack]) -> None:
    seen = {t.language_code for t in known}
    for track in found:
        if track.language_code not in seen:
            known.append(track)
            seen.add(track.language_code)


class FallbackOrchestrator:
    """
    Sequence a fixed list of strategies for one video.

    Args:
        strategies: Strategies in priority order.  The list is copied; the
                    orchestrator holds no other state between calls.
    """

    def __init__(self, strategies: Sequence[Strategy]) -> None:
        self.strategies = list(strategies)

    @property
    def names(self) -> list[str]:
        return [s.name for s in self.strategies]

    def run(self, video_id: str, language: str = "en") -> OrchestrationOutcome:
        """
        Try each strategy once, in order, until one returns captions.

        Args:
            video_id: A validated 11-character video ID.
            language: Preferred caption language code.

        Returns:
            OrchestrationOutcome whose result is the first successful
            ExtractionResult.  Its available_languages include every
            language discovered along the way.

        Raises:
            NoCaptionsAvailableError: Every strategy came back empty (or
                raised).  Carries the attempts and discovered languages.
        """
        attempts: list[StrategyAttempt] = []
        languages: list[CaptionTrack] = []

        for index, strategy in enumerate(self.strategies):
            logger.debug(f"Trying strategy {index + 1}/{len(self.strategies)}: {strategy.name}")
            try:
                result = strategy.try_extract(video_id, language)
            except Exception as exc:  # noqa: BLE001
                logger.exception(f"Strategy {strategy.name} raised unexpectedly")
                attempts.append(StrategyAttempt(strategy.name, False, f"{type(exc).__name__}: {exc}"))
                continue

            _merge_languages(languages, result.available_languages)

            if result.succeeded:
                attempts.append(
                    StrategyAttempt(strategy.name, True, f"{len(result.captions)} entries via {result.method_used}")
                )
                logger.info(
                    f"Extracted {len(result.captions)} caption entries for {video_id} "
                    f"with {result.method_used}"
                )
                result.available_languages = languages
                return OrchestrationOutcome(result=result, attempts=attempts)

            attempts.append(StrategyAttempt(strategy.name, False, "no captions found"))
            logger.debug(f"Strategy {strategy.name} found no captions for {video_id}")

        logger.warning(f"No captions for {video_id} after {len(attempts)} strategies")
        raise NoCaptionsAvailableError(video_id, attempts, languages)
