"""
Tagged results of a single illustration task.
"""

from __future__ import annotations

from dataclasses import dataclass

from pageturner.ai_generation import GeneratedAsset


@dataclass(frozen=True)
class AssetSuccess:
    asset: GeneratedAsset


@dataclass(frozen=True)
class AssetFailure:
    reason: str


AssetOutcome = AssetSuccess | AssetFailure
