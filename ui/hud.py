#!/usr/bin/env python3
"""Title bar, vehicle panel, legend and outcome banner (mixin)."""

from __future__ import annotations

from typing import Optional, Sequence

import pygame

from telemetry.message import AgentFrame

from .helpers import draw_alpha_rect, render_text


class HudRenderer:
    """Mixin that draws every overlay / HUD element."""

    # ------------------------------------------------------------------ #
    #  Title                                                               #
    # ------------------------------------------------------------------ #

    def draw_title(self, surface: pygame.Surface, round_index: int, rounds: int, sim_time: float) -> None:
        if self.font_title is None or self.font_small is None:
            return
        title = f"Round {round_index} / {rounds}" if rounds else f"Round {round_index}"
        render_text(surface, self.font_title, title, (self.width // 2, 14), self.TEXT_COLOR, anchor="midtop")
        render_text(
            surface, self.font_small, f"t = {sim_time:.2f} s",
            (self.width // 2, 48), self.MUTED_TEXT_COLOR, anchor="midtop",
        )

    # ------------------------------------------------------------------ #
    #  Vehicle panel                                                       #
    # ------------------------------------------------------------------ #

    def draw_hud(self, surface: pygame.Surface, frames: Sequence[AgentFrame]) -> None:
        if self.font_small is None or self.font_tiny is None:
            return

        row_height = 34
        header_h = 24
        panel_height = header_h + max(1, len(frames)) * row_height + 6
        panel_width = 250
        panel_rect = pygame.Rect(16, self.height - panel_height - 16, panel_width, panel_height)

        pygame.draw.rect(surface, self.HUD_BG_COLOR, panel_rect, border_radius=6)
        pygame.draw.rect(surface, self.HUD_BORDER_COLOR, panel_rect, width=1, border_radius=6)
        render_text(
            surface, self.font_tiny, f"VEHICLES {len(frames)}",
            (panel_rect.x + 10, panel_rect.y + 6), (180, 180, 180),
        )

        y = panel_rect.y + header_h
        for frame in frames:
            status = "AT GOAL" if frame.goal_reached else frame.action
            render_text(
                surface, self.font_small,
                f"{frame.name.upper()}  L{frame.level}", (panel_rect.x + 10, y), frame.color,
            )
            render_text(
                surface, self.font_tiny,
                f"SPEED {frame.state.speed:>4.1f} M/S   {status}",
                (panel_rect.x + 10, y + 16), (240, 240, 240),
            )
            y += row_height

    # ------------------------------------------------------------------ #
    #  Legend                                                              #
    # ------------------------------------------------------------------ #

    def _draw_legend(self, surface: pygame.Surface) -> None:
        if self.font_tiny is None:
            return
        x = self.width - 140
        y = self.height - 16 - len(self.LEGEND_ITEMS) * 18 - 8
        box_w, box_h = 132, len(self.LEGEND_ITEMS) * 18 + 10
        pygame.draw.rect(
            surface, self.HUD_BG_COLOR, (x - 6, y - 4, box_w, box_h), border_radius=4
        )
        pygame.draw.rect(
            surface, self.HUD_BORDER_COLOR, (x - 6, y - 4, box_w, box_h), width=1, border_radius=4
        )
        for label, color in self.LEGEND_ITEMS:
            pygame.draw.circle(surface, color, (x + 4, y + 6), 4)
            render_text(surface, self.font_tiny, label, (x + 14, y), (200, 200, 200))
            y += 18

    # ------------------------------------------------------------------ #
    #  Outcome banner                                                      #
    # ------------------------------------------------------------------ #

    def _draw_outcome_banner(
        self,
        surface: pygame.Surface,
        outcome: str,
        collision: Optional[Sequence[str]] = None,
    ) -> None:
        if self.font_title is None:
            return
        color = self.OUTCOME_COLORS.get(outcome, self.TEXT_COLOR)
        text = outcome.upper()
        if collision:
            text += f"  ({collision[0]} / {collision[1]})"
        band = pygame.Rect(0, self.height // 2 - 24, self.width, 48)
        draw_alpha_rect(surface, (0, 0, 0, 120), band)
        render_text(surface, self.font_title, text, band.center, color, anchor="center")
