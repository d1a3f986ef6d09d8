"""Smoke tests for the pygame UI.

These tests verify that the application's main loop can initialise and
execute a handful of frames without crashing when the SDL dummy drivers are
used. They do not check rendering correctness.
"""

from __future__ import annotations

import os

# Use the dummy drivers before importing pygame or the application
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")


def test_app_runs_headless() -> None:
    """Ensure the application can start and run a few frames headlessly."""
    from synesthesia_trainer.app import run
    from synesthesia_trainer.config import TrainerConfig

    exit_code = run(max_frames=3, config=TrainerConfig(sample_rate=22050))
    assert exit_code == 0


def test_app_runs_with_audio_disabled() -> None:
    from synesthesia_trainer.app import run
    from synesthesia_trainer.config import TrainerConfig

    assert run(max_frames=2, config=TrainerConfig(audio_enabled=False)) == 0
