#!/usr/bin/env python3
"""
Main view class: combines all UI mixins into one pygame window that
follows the telemetry stream of a running experiment.

Module layout
─────────────
    ui/
    ├── types.py           – ColorRGB, ColorRGBA, Camera
    ├── constants.py       – ViewConstants mixin and map palette
    ├── helpers.py         – fonts, geometry and text utilities
    ├── draw_road.py       – draw_map (roads, junction, lane markings)
    ├── draw_vehicles.py   – VehicleRenderer mixin (rectangles, paths, goals)
    ├── hud.py             – HudRenderer mixin  (title, panel, legend, banner)
    └── pygame_view.py     – RoundViewer (this file)

The viewer only *subscribes* to the bus: it never calls back into the
simulation, and closing the window merely stops the animation.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

import pygame

from sim.env import EnvCrossroads
from sim.physics import VehicleSpec
from telemetry import (
    TOPIC_ROUND_END,
    TOPIC_ROUND_START,
    TOPIC_TICK,
    RoundRecord,
    TelemetryBus,
    TelemetryMessage,
    TickRecord,
)

from .constants import ViewConstants
from .draw_road import draw_map
from .draw_vehicles import VehicleRenderer
from .helpers import load_font
from .hud import HudRenderer
from .types import Camera

log = logging.getLogger("viewer")


class RoundViewer(
    ViewConstants,
    VehicleRenderer,
    HudRenderer,
):
    """Live animation and end-of-round figures for the crossroads.

    Parameters
    ----------
    env : EnvCrossroads
        Map geometry to draw.
    spec : VehicleSpec
        Vehicle rectangle size.
    width, height : int
        Window (or figure) size in pixels.
    fps : int
        Frame-rate cap of the live animation.
    animate : bool
        Open a window and draw every tick.  When False the viewer renders
        off-screen, only for the saved figures.
    save_dir : str or Path or None
        Directory receiving ``Round_<i>.png``; *None* disables saving.
    """

    def __init__(
        self,
        env: EnvCrossroads,
        spec: VehicleSpec,
        width: int = 900,
        height: int = 900,
        fps: int = 20,
        animate: bool = True,
        save_dir: Optional[Union[str, Path]] = None,
    ) -> None:
        self.env = env
        self.spec = spec
        self.width = width
        self.height = height
        self.fps = fps
        self.animate = animate
        self.save_dir = Path(save_dir) if save_dir is not None else None

        self.camera = Camera.fit(width, height, env.map_size)
        self.screen: Optional[pygame.Surface] = None
        self.clock: Optional[pygame.time.Clock] = None
        self.font_small: Optional[pygame.font.Font] = None
        self.font_tiny: Optional[pygame.font.Font] = None
        self.font_title: Optional[pygame.font.Font] = None

        self.window_closed = False
        self.show_legend = True
        self.saved_figures = []

    # ------------------------------------------------------------------ #
    #  Setup                                                               #
    # ------------------------------------------------------------------ #
    def _ensure_surface(self) -> pygame.Surface:
        if self.screen is not None:
            return self.screen
        pygame.init()
        self.font_small = load_font(13)
        self.font_tiny = load_font(11)
        self.font_title = load_font(24, bold=True)
        if self.animate:
            pygame.display.set_caption("LEVEL-K CROSSROADS")
            self.screen = pygame.display.set_mode((self.width, self.height))
            self.clock = pygame.time.Clock()
        else:
            self.screen = pygame.Surface((self.width, self.height))
        return self.screen

    def attach(self, bus: TelemetryBus) -> "RoundViewer":
        """Subscribe to the round and tick topics of *bus*."""
        bus.subscribe(TOPIC_ROUND_START, self.on_message)
        bus.subscribe(TOPIC_TICK, self.on_message)
        bus.subscribe(TOPIC_ROUND_END, self.on_message)
        return self

    def close(self) -> None:
        if self.screen is not None:
            pygame.quit()
            self.screen = None

    # ------------------------------------------------------------------ #
    #  Bus callbacks                                                       #
    # ------------------------------------------------------------------ #
    def on_message(self, msg: TelemetryMessage) -> None:
        if msg.topic == TOPIC_TICK:
            self.on_tick(msg.payload)
        elif msg.topic == TOPIC_ROUND_START:
            self.on_round_start(msg.payload)
        elif msg.topic == TOPIC_ROUND_END:
            self.on_round_end(msg.payload)

    def on_round_start(self, record: RoundRecord) -> None:
        if not self.animate or self.window_closed:
            return
        self._render_frame(record.agents, record.round_index, record.rounds, 0.0)
        self._present()

    def on_tick(self, record: TickRecord) -> None:
        if not self.animate or self.window_closed:
            return
        self._render_frame(record.agents, record.round_index, record.rounds, record.time)
        self._present()

    def on_round_end(self, record: RoundRecord) -> None:
        if self.window_closed and self.save_dir is None:
            return
        if not self.animate and self.save_dir is None:
            return
        surface = self.render_figure(record)
        if self.save_dir is not None:
            self.save_figure(surface, record.round_index)
        if self.animate and not self.window_closed:
            self._present()

    # ------------------------------------------------------------------ #
    #  Rendering                                                           #
    # ------------------------------------------------------------------ #
    def _render_frame(self, frames, round_index: int, rounds: int, sim_time: float) -> pygame.Surface:
        surface = self._ensure_surface()
        draw_map(surface, self.camera, self.env)
        self.draw_vehicles(surface, frames, self.spec)
        self.draw_title(surface, round_index, rounds, sim_time)
        self.draw_hud(surface, frames)
        if self.show_legend:
            self._draw_legend(surface)
        return surface

    def render_figure(self, record: RoundRecord) -> pygame.Surface:
        """End-of-round figure: the whole footprint history plus final poses."""
        surface = self._ensure_surface()
        draw_map(surface, self.camera, self.env)
        for frame in record.agents:
            self.draw_footprint(surface, frame, self.spec)
        self.draw_vehicles(surface, record.agents, self.spec)
        self.draw_title(surface, record.round_index, record.rounds, record.time)
        self.draw_hud(surface, record.agents)
        if record.outcome:
            self._draw_outcome_banner(surface, record.outcome, record.collision)
        return surface

    def save_figure(
        self,
        surface: pygame.Surface,
        round_index: int,
        directory: Optional[Union[str, Path]] = None,
    ) -> Path:
        """Write ``Round_<i>.png`` to *directory* (default: ``save_dir``)."""
        target = Path(directory) if directory is not None else self.save_dir
        if target is None:
            raise ValueError("no directory to save the figure in")
        os.makedirs(target, exist_ok=True)
        path = target / f"{self.FIGURE_PREFIX}{round_index}.png"
        pygame.image.save(surface, str(path))
        self.saved_figures.append(path)
        log.info("figure saved: %s", path)
        return path

    def _present(self) -> None:
        """Flip the window and pump its events; never blocks the simulation for long."""
        if self.screen is None or not self.animate:
            return
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                log.info("viewer window closed; simulation continues without animation")
                self.window_closed = True
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_l:
                self.show_legend = not self.show_legend
        if self.window_closed:
            return
        pygame.display.flip()
        if self.clock is not None:
            self.clock.tick(self.fps)
