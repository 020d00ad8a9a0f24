#!/usr/bin/env python3
"""Vehicle rectangles, goal markers, expected paths and footprint history (mixin)."""

from __future__ import annotations

import math
from typing import Sequence

import pygame

from sim.physics import VehicleSpec
from telemetry.message import AgentFrame

from .helpers import polyline, render_text, to_screen, vehicle_polygon


class VehicleRenderer:
    """Mixin that draws every vehicle-related layer."""

    # ------------------------------------------------------------------ #
    #  Public draw methods                                                 #
    # ------------------------------------------------------------------ #

    def draw_vehicle(self, surface: pygame.Surface, frame: AgentFrame, spec: VehicleSpec) -> None:
        points = vehicle_polygon(self.camera, frame.state, spec.length, spec.width)
        pygame.draw.polygon(surface, frame.color, points)
        pygame.draw.polygon(surface, (235, 235, 235), points, width=1)

        # Heading tick from the centre to the front bumper
        s = frame.state
        nose = (s.x + 0.5 * spec.length * math.cos(s.heading),
                s.y + 0.5 * spec.length * math.sin(s.heading))
        pygame.draw.line(surface, (255, 248, 200),
                         to_screen(self.camera, s.x, s.y),
                         to_screen(self.camera, *nose), 2)

    def draw_vehicle_labels(self, surface: pygame.Surface, frame: AgentFrame) -> None:
        if self.font_tiny is None:
            return
        x, y = to_screen(self.camera, frame.state.x, frame.state.y)
        lines = (
            f"level {frame.level}",
            f"v = {frame.state.speed:.2f} m/s",
            frame.action,
        )
        ty = y + 14
        for line in lines:
            render_text(surface, self.font_tiny, line, (x + 14, ty), frame.color)
            ty += 13

    def draw_goal(self, surface: pygame.Surface, frame: AgentFrame) -> None:
        centre = to_screen(self.camera, frame.goal.x, frame.goal.y)
        r = self.GOAL_RADIUS_PX
        pygame.draw.circle(surface, frame.color, centre, r, width=2)
        pygame.draw.line(surface, frame.color, (centre[0] - r, centre[1]), (centre[0] + r, centre[1]))
        pygame.draw.line(surface, frame.color, (centre[0], centre[1] - r), (centre[0], centre[1] + r))

    def draw_expected_trajectory(self, surface: pygame.Surface, frame: AgentFrame) -> None:
        points = polyline(self.camera, frame.expected_trajectory)
        if len(points) < 2:
            return
        pygame.draw.lines(surface, frame.color, False, points, 1)
        for p in points[1:]:
            pygame.draw.circle(surface, frame.color, p, 2)

    def draw_footprint(self, surface: pygame.Surface, frame: AgentFrame, spec: VehicleSpec) -> None:
        """Every committed state of the round as translucent rectangles."""
        r, g, b = frame.color
        layer = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
        for state in frame.footprint:
            points = vehicle_polygon(self.camera, state, spec.length, spec.width)
            pygame.draw.polygon(layer, (r, g, b, self.FOOTPRINT_ALPHA), points)
        surface.blit(layer, (0, 0))
        path = polyline(self.camera, frame.footprint)
        if len(path) >= 2:
            pygame.draw.lines(surface, frame.color, False, path, 1)

    def draw_vehicles(self, surface: pygame.Surface, frames: Sequence[AgentFrame], spec: VehicleSpec) -> None:
        for frame in frames:
            self.draw_goal(surface, frame)
        for frame in frames:
            self.draw_expected_trajectory(surface, frame)
        for frame in frames:
            self.draw_vehicle(surface, frame, spec)
            self.draw_vehicle_labels(surface, frame)
