"""Pygame host for the walkthrough engine.

The host only pumps the session once per frame and draws its snapshot as a
text panel; all timing, phase and derived-value logic lives in the session.

Keys: Space pause/resume, S show/hide solution, R restart, Esc back/quit.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

import pygame

from .audio import PygameAudioSink
from .clock import RealClock
from .effects import AudioSink, SilentAudioSink
from .registry import WALKTHROUGHS, build_session
from .session import SessionController, SessionOptions, SessionState, WalkthroughSnapshot
from .timeline import DEFAULT_TICK_PERIOD_MS

logger = logging.getLogger(__name__)

WINDOW_SIZE = (960, 540)
TARGET_FPS = 60

# Example problems offered by the menu when no variant is given on the command line.
EXAMPLE_PROBLEMS: tuple[tuple[str, str, tuple[float, ...], dict[str, str]], ...] = (
    ("Fair sharing: 13 ÷ 4", "fair-sharing", (13, 4), {}),
    ("Long division: 156 ÷ 12", "long-division", (156, 12), {}),
    ("Fractions: 1/2 + 1/3", "fraction-operation", (1, 2, 1, 3), {"operation": "addition"}),
    ("Fractions: 2/3 ÷ 3/4", "fraction-operation", (2, 3, 3, 4), {"operation": "division"}),
    ("Factoring: x² + 7x + 12", "factoring", (1, 7, 12), {}),
    ("Limit at x = 2", "limit", (2, 4), {"side": "both"}),
    ("Derivative of x² at x = 1", "derivative", (1, 0, 0, 1), {}),
    ("Place value: 47 + 35", "place-value", (47, 35), {"operation": "addition"}),
    ("Place value: 52 - 28", "place-value", (52, 28), {"operation": "subtraction"}),
)


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...

    def update(self) -> None: ...

    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


class App:
    """Screen stack; only the top screen sees events and frames."""

    def __init__(self, surface: pygame.Surface) -> None:
        self._surface = surface
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def top(self) -> Screen | None:
        return self._screens[-1] if self._screens else None

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # The root screen handles its own quit/back behavior.
        if len(self._screens) > 1:
            self._screens.pop()

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        screen = self.top
        if screen is not None:
            screen.handle_event(event)

    def update(self) -> None:
        screen = self.top
        if screen is not None:
            screen.update()

    def render(self) -> None:
        screen = self.top
        if screen is not None:
            screen.render(self._surface)


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
        if event.type != pygame.KEYDOWN:
            return
        key = event.key
        if key in (pygame.K_UP, pygame.K_w):
            self._move(-1)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._move(1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            if self._items:
                self._items[self._selected].action()
        elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            if self._is_root:
                self._app.quit()
            else:
                self._app.pop()

    def update(self) -> None:
        return None

    def _move(self, delta: int) -> None:
        if self._items:
            self._selected = (self._selected + delta) % len(self._items)

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        surface.fill((3, 9, 78))
        title = self._title_font.render(self._title, True, (238, 245, 255))
        surface.blit(title, title.get_rect(midtop=(w // 2, 24)))

        y = 90
        row_h = 38
        for idx, item in enumerate(self._items):
            row = pygame.Rect(60, y, w - 120, row_h - 6)
            selected = idx == self._selected
            pygame.draw.rect(surface, (244, 248, 255) if selected else (9, 20, 106), row)
            pygame.draw.rect(surface, (62, 84, 152), row, 1)
            color = (14, 26, 74) if selected else (238, 245, 255)
            text = self._item_font.render(item.label, True, color)
            surface.blit(text, (row.x + 10, row.y + (row.h - text.get_height()) // 2))
            y += row_h

        foot = self._hint_font.render("Enter/Space: Select  |  Esc: Back", True, (186, 200, 224))
        surface.blit(foot, foot.get_rect(midbottom=(w // 2, h - 10)))


def payload_lines(payload: object | None) -> list[str]:
    """Flatten a payload dataclass into ``name: value`` lines."""

    if payload is None or not dataclasses.is_dataclass(payload):
        return []
    lines: list[str] = []
    for f in dataclasses.fields(payload):
        value = getattr(payload, f.name)
        if isinstance(value, float):
            text = f"{value:.3f}"
        elif dataclasses.is_dataclass(value):
            text = ", ".join(f"{g.name}={getattr(value, g.name)}" for g in dataclasses.fields(value))
        else:
            text = str(value)
        lines.append(f"{f.name}: {text}")
    return lines


class WalkthroughScreen:
    def __init__(self, app: App, session: SessionController, *, is_root: bool = False) -> None:
        self._app = app
        self._session = session
        self._is_root = is_root
        self._title_font = pygame.font.Font(None, 42)
        self._body_font = pygame.font.Font(None, 30)
        self._small_font = pygame.font.Font(None, 22)

    @property
    def session(self) -> SessionController:
        return self._session

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        session = self._session
        if event.key == pygame.K_SPACE:
            session.set_paused(not session.tick_state.paused)
        elif event.key == pygame.K_s:
            session.set_show_solution(not session.show_solution)
        elif event.key == pygame.K_r:
            session.reset()
            session.start()
        elif event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            session.close()
            if self._is_root:
                self._app.quit()
            else:
                self._app.pop()

    def update(self) -> None:
        self._session.pump()

    def render(self, surface: pygame.Surface) -> None:
        snap = self._session.snapshot()
        w, h = surface.get_size()
        surface.fill((10, 10, 14))

        title = self._title_font.render(snap.title, True, (235, 235, 245))
        surface.blit(title, (40, 24))

        if snap.state is SessionState.INVALID:
            self._render_invalid(surface, snap)
            return

        phase = "-" if snap.phase is None else str(snap.phase.value)
        status = f"{snap.state.value}  |  phase: {phase}  |  tick {snap.tick}"
        surface.blit(self._small_font.render(status, True, (180, 180, 190)), (40, 70))

        bar = pygame.Rect(40, 96, w - 80, 10)
        pygame.draw.rect(surface, (40, 40, 52), bar)
        pygame.draw.rect(surface, (90, 170, 250), (bar.x, bar.y, int(bar.w * snap.progress), bar.h))

        y = 124
        for line in _wrap(self._body_font, snap.narration, w - 80):
            surface.blit(self._body_font.render(line, True, (235, 235, 245)), (40, y))
            y += self._body_font.get_linesize()

        y += 10
        for line in payload_lines(snap.payload):
            if y > h - 40:
                break
            text = self._small_font.render(line, True, (170, 200, 170))
            surface.blit(text, (40, y))
            y += self._small_font.get_linesize()

        hint = "Space: pause  |  S: show/hide solution  |  R: restart  |  Esc: back"
        foot = self._small_font.render(hint, True, (140, 140, 150))
        surface.blit(foot, foot.get_rect(midbottom=(w // 2, h - 10)))

    def _render_invalid(self, surface: pygame.Surface, snap: WalkthroughSnapshot) -> None:
        w, _ = surface.get_size()
        panel = pygame.Rect(40, 80, w - 80, 160)
        pygame.draw.rect(surface, (70, 20, 24), panel)
        pygame.draw.rect(surface, (220, 90, 90), panel, 2)
        head = self._body_font.render("Invalid problem", True, (255, 200, 200))
        surface.blit(head, (panel.x + 14, panel.y + 12))
        y = panel.y + 50
        for line in _wrap(self._small_font, snap.invalid_reason or "", panel.w - 28):
            surface.blit(self._small_font.render(line, True, (250, 220, 220)), (panel.x + 14, y))
            y += self._small_font.get_linesize()


def _wrap(font: pygame.font.Font, text: str, max_width: int) -> list[str]:
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}".strip()
        if current and font.size(candidate)[0] > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    variant: str | None = None,
    operands: Sequence[float] = (),
    flags: Mapping[str, str] | None = None,
    speed: float = 1.0,
    period_ms: float = DEFAULT_TICK_PERIOD_MS,
    paused: bool = False,
    mute: bool = False,
) -> int:
    pygame.init()
    pygame.display.set_caption("Math Walkthroughs")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    clock = pygame.time.Clock()
    app = App(surface)

    audio: AudioSink = SilentAudioSink() if mute else PygameAudioSink()
    real_clock = RealClock()
    options = SessionOptions(show_solution=True, is_paused=paused, tick_period_ms=period_ms, speed=speed)

    def open_walkthrough(
        name: str, values: Sequence[float], extra: Mapping[str, str] | None, *, is_root: bool = False
    ) -> None:
        session = build_session(
            variant=name,
            operands=values,
            flags=extra,
            clock=real_clock,
            audio=audio,
            options=options,
            on_complete=lambda: logger.info("%s walkthrough finished", name),
        )
        app.push(WalkthroughScreen(app, session, is_root=is_root))

    if variant is not None:
        open_walkthrough(variant, operands, flags, is_root=True)
    else:
        items = [
            MenuItem(label, lambda v=key, o=ops, f=fl: open_walkthrough(v, o, f))
            for label, key, ops, fl in EXAMPLE_PROBLEMS
            if key in WALKTHROUGHS
        ]
        items.append(MenuItem("Quit", app.quit))
        app.push(MenuScreen(app, "Math Walkthroughs", items, is_root=True))

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.update()
            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0
