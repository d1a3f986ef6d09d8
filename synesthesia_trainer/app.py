"""Pygame UI shell for the Letter Synesthesia Trainer.

The window shows one letter on its background color. Clicking the card (or
pressing Space) plays the letter's tone; the Next button (or Enter / Right
arrow) marks the letter as practised and moves on to the least-practised one.

Deterministic mapping/scheduling lives in synesthesia_trainer/* (core
modules); this file only adapts pygame input, drawing and the mixer to them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import pygame

from .clock import Clock, RealClock, ScheduledCall, TimerQueue
from .config import TrainerConfig, load_config
from .drill import DrillSnapshot, LetterDrill
from .stimulus import ColorEntry, parse_color
from .tone import ATTACK_MS, render_tone_pcm

logger = logging.getLogger(__name__)


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


class _LetterToneAudioAdapter:
    """Pygame mixer tone sink.

    Builds each tone as a stereo PCM buffer, plays it on a free channel and
    queues a stop on the TimerQueue once the tone's duration has elapsed.
    Mixer problems disable audio instead of reaching the drill.
    """

    def __init__(self, *, timers: TimerQueue, sample_rate: int, enabled: bool = True) -> None:
        self._timers = timers
        self._available = False
        self._sample_rate = int(sample_rate)
        self._mixer_channels = 2
        self._sound_cache: dict[tuple[float, float, float, int], pygame.mixer.Sound] = {}
        self._channels: list[pygame.mixer.Channel] = []
        self._channel_stops: dict[int, ScheduledCall] = {}

        if not enabled:
            logger.info("audio disabled by configuration")
            return

        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init(frequency=self._sample_rate, size=-16, channels=2, buffer=512)
            init = pygame.mixer.get_init()
            if init is None:
                raise pygame.error("mixer did not initialise")
            self._sample_rate = int(init[0])
            self._mixer_channels = int(init[2])
            pygame.mixer.set_num_channels(max(8, int(pygame.mixer.get_num_channels())))
            self._channels = [pygame.mixer.Channel(i) for i in range(pygame.mixer.get_num_channels())]
            self._available = True
        except (pygame.error, NotImplementedError):
            logger.warning("audio unavailable; tones will be silent", exc_info=True)
            self._available = False

    @property
    def available(self) -> bool:
        return self._available

    def play_tone(
        self,
        *,
        frequency_hz: float,
        volume_gain: float,
        azimuth_rad: float,
        duration_ms: int,
    ) -> None:
        if not self._available:
            return

        sound = self._sound_for(frequency_hz, volume_gain, azimuth_rad, duration_ms)
        index = self._free_channel_index()
        if index is None:
            logger.debug("no mixer channels")
            return
        channel = self._channels[index]

        # A stop still queued for this channel belongs to a tone that already ended.
        previous = self._channel_stops.pop(index, None)
        if previous is not None:
            previous.cancel()

        channel.play(sound)
        self._channel_stops[index] = self._timers.schedule(
            duration_ms / 1000.0,
            lambda: self._stop_channel(index, sound),
        )
        logger.debug(
            "tone %.1f Hz gain %.2f azimuth %.3f rad on channel %d",
            frequency_hz,
            volume_gain,
            azimuth_rad,
            index,
        )

    def stop(self) -> None:
        for call in self._channel_stops.values():
            call.cancel()
        self._channel_stops = {}
        if self._available:
            try:
                pygame.mixer.stop()
            except pygame.error:
                logger.debug("mixer stop failed", exc_info=True)

    def _free_channel_index(self) -> int | None:
        if not self._channels:
            return None
        for idx, channel in enumerate(self._channels):
            if not channel.get_busy():
                return idx
        # All busy: steal the channel whose stop is due first.
        if self._channel_stops:
            return min(self._channel_stops, key=lambda i: self._channel_stops[i].due_at_s)
        return 0

    def _stop_channel(self, index: int, sound: pygame.mixer.Sound) -> None:
        self._channel_stops.pop(index, None)
        channel = self._channels[index]
        try:
            if channel.get_sound() is sound:
                channel.stop()
        except pygame.error:
            logger.debug("tone stop on channel %d failed", index, exc_info=True)

    def _sound_for(
        self,
        frequency_hz: float,
        volume_gain: float,
        azimuth_rad: float,
        duration_ms: int,
    ) -> pygame.mixer.Sound:
        key = (round(frequency_hz, 3), round(volume_gain, 4), round(azimuth_rad, 4), int(duration_ms))
        cached = self._sound_cache.get(key)
        if cached is not None:
            return cached

        pcm = render_tone_pcm(
            frequency_hz=frequency_hz,
            volume_gain=volume_gain,
            azimuth_rad=azimuth_rad,
            sample_rate=self._sample_rate,
            duration_ms=int(duration_ms),
            attack_ms=min(ATTACK_MS, int(duration_ms) - 1),
        )
        if self._mixer_channels == 1:
            mono = pcm[::2]
            for i in range(len(mono)):
                mono[i] = (pcm[2 * i] + pcm[2 * i + 1]) // 2
            pcm = mono
        sound = pygame.mixer.Sound(buffer=pcm.tobytes())
        self._sound_cache[key] = sound
        return sound


class LetterCard:
    """Render sink: remembers which letter/color the drill asked to show."""

    def __init__(self) -> None:
        self._letter = ""
        self._color = ColorEntry(255, 255, 255)

    @property
    def letter(self) -> str:
        return self._letter

    @property
    def color(self) -> ColorEntry:
        return self._color

    def render(self, letter: str, color_hex: str) -> None:
        self._letter = letter
        self._color = parse_color(color_hex) or ColorEntry(255, 255, 255)

    def text_color(self) -> tuple[int, int, int]:
        c = self._color
        luma = 0.299 * c.red + 0.587 * c.green + 0.114 * c.blue
        return (16, 18, 24) if luma >= 140.0 else (245, 245, 250)


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        self._surface = surface
        self._font = font
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    @property
    def top(self) -> Screen | None:
        return self._screens[-1] if self._screens else None

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the last/root screen; root handles its own quit/back behavior.
        if len(self._screens) > 1:
            self._screens.pop()

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


class MenuScreen:
    def __init__(self, app: App, title: str, items: list[MenuItem], *, is_root: bool = False) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = 0
        self._is_root = is_root
        self._title_font = pygame.font.Font(None, 42)
        self._item_font = pygame.font.Font(None, 32)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            self._handle_key(event.key)

    def _handle_key(self, key: int) -> None:
        if key in (pygame.K_UP, pygame.K_w):
            self._move(-1)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._move(1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._activate()
        elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._back()

    def _move(self, delta: int) -> None:
        if not self._items:
            return
        self._selected = (self._selected + delta) % len(self._items)

    def _activate(self) -> None:
        if not self._items:
            return
        self._items[self._selected].action()

    def _back(self) -> None:
        if self._is_root:
            self._app.quit()
        else:
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        bg = (18, 14, 32)
        border = (226, 226, 245)
        text_main = (238, 238, 250)
        text_muted = (176, 176, 200)
        active_bg = (244, 244, 255)
        active_text = (24, 18, 52)

        surface.fill(bg)
        margin = max(10, min(26, w // 34))
        frame = pygame.Rect(margin, margin, max(260, w - margin * 2), max(220, h - margin * 2))
        pygame.draw.rect(surface, border, frame, 2)

        title = self._title_font.render(self._title, True, text_main)
        surface.blit(title, title.get_rect(midtop=(frame.centerx, frame.y + 18)))

        row_h = 44
        y = frame.y + 90
        for idx, item in enumerate(self._items):
            row = pygame.Rect(frame.x + 40, y, frame.w - 80, row_h)
            selected = idx == self._selected
            if selected:
                pygame.draw.rect(surface, active_bg, row)
            else:
                pygame.draw.rect(surface, (62, 56, 110), row, 1)
            text = self._item_font.render(item.label, True, active_text if selected else text_main)
            surface.blit(text, (row.x + 12, row.y + (row.h - text.get_height()) // 2))
            y += row_h + 8

        foot = self._hint_font.render("Enter/Space: Select  |  Esc/Backspace: Back", True, text_muted)
        surface.blit(foot, foot.get_rect(midbottom=(frame.centerx, frame.bottom - 10)))


class DrillScreen:
    _PLAY_KEYS = (pygame.K_SPACE, pygame.K_p)
    _NEXT_KEYS = (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_RIGHT, pygame.K_n)

    def __init__(
        self,
        app: App,
        *,
        drill_factory: Callable[[LetterCard], LetterDrill],
        on_exit: Callable[[], None] | None = None,
    ) -> None:
        self._app = app
        self._card = LetterCard()
        self._drill = drill_factory(self._card)
        self._on_exit = on_exit
        self._letter_font = pygame.font.Font(None, 240)
        self._button_font = app.font
        self._hint_font = pygame.font.Font(None, 22)
        self._next_button = pygame.Rect(0, 0, 0, 0)

    @property
    def drill(self) -> LetterDrill:
        return self._drill

    @property
    def card(self) -> LetterCard:
        return self._card

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            if event.key in self._PLAY_KEYS:
                self._drill.on_play_requested()
            elif event.key in self._NEXT_KEYS:
                self._drill.on_advance_requested()
            elif event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
                self._exit()
            return

        if event.type == pygame.MOUSEBUTTONDOWN and getattr(event, "button", 1) == 1:
            if self._next_button.collidepoint(event.pos):
                self._drill.on_advance_requested()
            else:
                self._drill.on_play_requested()

    def _exit(self) -> None:
        if self._on_exit is not None:
            self._on_exit()
        self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        snap: DrillSnapshot = self._drill.snapshot()
        fg = self._card.text_color()

        surface.fill(self._card.color.as_tuple())

        glyph = self._letter_font.render(self._card.letter, True, fg)
        surface.blit(glyph, glyph.get_rect(center=(w // 2, h // 2 - 30)))

        self._next_button = pygame.Rect(0, 0, 160, 52)
        self._next_button.midbottom = (w // 2, h - 40)
        pygame.draw.rect(surface, (250, 250, 252), self._next_button)
        pygame.draw.rect(surface, (30, 30, 40), self._next_button, 2)
        label = self._button_font.render("Next", True, (30, 30, 40))
        surface.blit(label, label.get_rect(center=self._next_button.center))

        weakest = " ".join(snap.weakest) if snap.weakest else "-"
        status = f"Seen {snap.score}x  |  Total {snap.total_practiced}  |  Least practised: {weakest}"
        hint = self._hint_font.render(status, True, fg)
        surface.blit(hint, (16, 14))
        keys = self._hint_font.render("Click/Space: Play  |  Next/Enter: Advance  |  Esc: Back", True, fg)
        surface.blit(keys, keys.get_rect(bottomright=(w - 16, h - 10)))


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    config: TrainerConfig | None = None,
    clock: Clock | None = None,
) -> int:
    cfg = load_config() if config is None else config
    pygame.init()

    pygame.display.set_caption("Letter Synesthesia Trainer")
    surface = pygame.display.set_mode(cfg.window_size, pygame.RESIZABLE)

    font = pygame.font.Font(None, 36)
    frame_clock = pygame.time.Clock()

    app = App(surface=surface, font=font)
    timers = TimerQueue(RealClock() if clock is None else clock)
    audio = _LetterToneAudioAdapter(
        timers=timers,
        sample_rate=cfg.sample_rate,
        enabled=cfg.audio_enabled,
    )

    def open_drill() -> None:
        app.push(
            DrillScreen(
                app,
                drill_factory=lambda card: LetterDrill(tone_sink=audio, render_sink=card),
                on_exit=audio.stop,
            )
        )

    main_items = [
        MenuItem("Letter drill", open_drill),
        MenuItem("Quit", app.quit),
    ]
    app.push(MenuScreen(app, "Letter Synesthesia Trainer", main_items, is_root=True))

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            timers.poll()
            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            frame_clock.tick(cfg.target_fps)
    finally:
        timers.cancel_all()
        audio.stop()
        pygame.quit()

    return 0
