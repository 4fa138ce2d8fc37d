"""
CLI example to run the complete PageTurnerAI pipeline end-to-end.

Usage:
    python scripts/run_full_pipeline.py \
        --prompt "A boy and a dog meet at street and became best friends" \
        --output story_package.yaml
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import sys
from pathlib import Path
from typing import Any, Dict

from tqdm.auto import tqdm

# Ensure project root is on the Python path when running as a script.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pageturner import InvalidPromptError, OutlineGenerationError, Settings, StorybookOrchestrator
from pageturner.ai_generation import STYLE_PROFILES
from pageturner.common import configure_logging


class ProgressTracker:
    """
    Provides user-friendly command-line progress updates for the PageTurnerAI pipeline.
    """

    def __init__(self) -> None:
        self._asset_bar: tqdm | None = None

    def __call__(self, stage: str, payload: Dict[str, Any]) -> None:
        match stage:
            case "outline:generating":
                self._write("[1/3] Generating the story outline...")
            case "outline:ready":
                title = payload.get("title", "Untitled")
                total = payload.get("total_pages", 0)
                self._write(f"[1/3] Outline ready: '{title}' ({total} pages).")
            case "assets:generating":
                total = payload.get("total_pages", 0)
                limit = payload.get("max_concurrent") or "unbounded"
                self._write(f"[2/3] Illustrating cover and {total} pages (concurrency: {limit})...")
                self._asset_bar = tqdm(total=total + 1, desc="Illustrations", unit="image")
            case "asset:done" | "asset:failed":
                if self._asset_bar is not None:
                    if stage == "asset:failed":
                        self._asset_bar.set_description(f"Failed: {payload.get('label')}")
                    self._asset_bar.update(1)
            case "story:complete":
                self.close()
                failed = payload.get("failed_pages", 0)
                suffix = f" ({failed} pages without an image)." if failed else "."
                self._write(f"[3/3] Story complete{suffix}")

    def close(self) -> None:
        if self._asset_bar is not None:
            self._asset_bar.close()
            self._asset_bar = None

    @staticmethod
    def _write(message: str) -> None:
        tqdm.write(message)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the full PageTurnerAI generation pipeline.")
    parser.add_argument(
        "--prompt",
        required=True,
        help="Free-text idea for the story.",
    )
    parser.add_argument(
        "--output",
        default="story_package.yaml",
        help="Output file (.yaml/.yml or .json) to store the generated story.",
    )
    parser.add_argument(
        "--style-profile",
        default=None,
        choices=sorted(STYLE_PROFILES),
        help="Override the illustration style profile.",
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Override the number of illustrations generated at once (0 = unbounded).",
    )
    return parser.parse_args()


def build_settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    overrides: dict[str, Any] = {}
    if args.style_profile is not None:
        overrides["style_profile"] = args.style_profile
    if args.max_concurrency is not None:
        overrides["max_concurrent_assets"] = args.max_concurrency if args.max_concurrency > 0 else None
    return dataclasses.replace(settings, **overrides) if overrides else settings


def main() -> int:
    args = parse_args()
    settings = build_settings(args)
    configure_logging("WARNING")

    orchestrator = StorybookOrchestrator(settings=settings)
    tracker = ProgressTracker()

    try:
        story = asyncio.run(orchestrator.generate_story(args.prompt, progress_callback=tracker))
    except InvalidPromptError:
        print("A non-empty --prompt is required.", file=sys.stderr)
        return 2
    except OutlineGenerationError as exc:
        print(f"Failed to generate story: {exc.__cause__ or exc}", file=sys.stderr)
        return 1
    finally:
        tracker.close()

    output_path = Path(args.output)
    if output_path.suffix.lower() == ".json":
        output_path.write_text(json.dumps(story.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    else:
        output_path.write_text(story.to_yaml(), encoding="utf-8")
    print(f"Saved story package to {output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
