from __future__ import annotations

import math
from typing import TYPE_CHECKING, Tuple

import pygame

from ..config import SimulationConfig
from ..sim.systems.effects import EffectKind

if TYPE_CHECKING:
    from ..sim.core.world import World

# ---------- Colors ----------
BG_COLOR = (248, 246, 250)
ARENA_COLOR = (255, 0, 0, 76)
PROTECTED_COLOR = (255, 215, 0)
DRUG_COLOR = (255, 200, 150)
DARKENING_COLOR = (0, 0, 0)
MIST_COLOR = (255, 255, 255)
HEART_COLOR = (255, 105, 180)
HUD_COLOR = (40, 40, 48)
BUBBLE_BG = (255, 255, 255)
BUBBLE_BORDER = (90, 90, 100)
ENDING_OVERLAY = (0, 0, 0, 150)
ENDING_TEXT = (255, 255, 255)

ARENA_DASH = (10, 5)
DRUG_DASH = (6, 6)

Color = Tuple[int, int, int]


def _dashed_line(surface: pygame.Surface, color, start, end, dash: Tuple[int, int], width: int = 2) -> None:
    x0, y0 = start
    x1, y1 = end
    length = math.hypot(x1 - x0, y1 - y0)
    if length <= 0:
        return
    on, off = dash
    ux, uy = (x1 - x0) / length, (y1 - y0) / length
    pos = 0.0
    while pos < length:
        seg_end = min(pos + on, length)
        pygame.draw.line(
            surface,
            color,
            (x0 + ux * pos, y0 + uy * pos),
            (x0 + ux * seg_end, y0 + uy * seg_end),
            width,
        )
        pos += on + off


def _dashed_circle(surface: pygame.Surface, color, center, radius: float, dash: Tuple[int, int], width: int = 1) -> None:
    if radius <= 0:
        return
    circumference = 2.0 * math.pi * radius
    on, off = dash
    step = (on + off) / circumference * 2.0 * math.pi
    span = on / circumference * 2.0 * math.pi
    rect = pygame.Rect(0, 0, radius * 2, radius * 2)
    rect.center = (int(center[0]), int(center[1]))
    angle = 0.0
    while angle < 2.0 * math.pi:
        pygame.draw.arc(surface, color, rect, angle, angle + span, width)
        angle += step


def _heart_points(cx: float, cy: float, size: float) -> list[tuple[float, float]]:
    points = []
    for i in range(24):
        t = i / 24.0 * 2.0 * math.pi
        x = 16 * math.sin(t) ** 3
        y = 13 * math.cos(t) - 5 * math.cos(2 * t) - 2 * math.cos(3 * t) - math.cos(4 * t)
        points.append((cx + x * size / 16.0, cy - y * size / 16.0))
    return points


class Renderer:
    """Draws a `World` onto a pygame surface. Purely a reader of simulation state."""

    def __init__(self, config: SimulationConfig):
        self.config = config
        if not pygame.font.get_init():
            pygame.font.init()
        self.font = pygame.font.Font(None, 20)
        self.caption_font = pygame.font.Font(None, 18)
        self.big_font = pygame.font.Font(None, 56)
        self.quote_font = pygame.font.Font(None, 26)

    @property
    def size(self) -> Tuple[int, int]:
        return int(self.config.canvas_width), int(self.config.canvas_height)

    def create_surface(self) -> pygame.Surface:
        return pygame.Surface(self.size)

    def draw(self, world: World, surface: pygame.Surface) -> None:
        surface.fill(BG_COLOR)
        overlay = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
        self._draw_arena(world, overlay)
        self._draw_drugs(world, overlay)
        self._draw_effects(world, overlay, EffectKind.MIST)
        surface.blit(overlay, (0, 0))
        self._draw_agents(world, surface)

        overlay = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
        self._draw_effects(world, overlay, EffectKind.DARKENING)
        self._draw_effects(world, overlay, EffectKind.HEART)
        surface.blit(overlay, (0, 0))

        self._draw_captions(world, surface)
        self._draw_hud(world, surface)
        if world.outcome is not None:
            self._draw_ending(world, surface)

    def render(self, world: World) -> pygame.Surface:
        surface = self.create_surface()
        self.draw(world, surface)
        return surface

    # ---------- layers ----------
    def _draw_arena(self, world: World, overlay: pygame.Surface) -> None:
        bounds = world.arena
        corners = [
            (bounds.left, bounds.top),
            (bounds.right, bounds.top),
            (bounds.right, bounds.bottom),
            (bounds.left, bounds.bottom),
        ]
        for start, end in zip(corners, corners[1:] + corners[:1]):
            _dashed_line(overlay, ARENA_COLOR, start, end, ARENA_DASH, 2)

    def _draw_drugs(self, world: World, overlay: pygame.Surface) -> None:
        now = world.now
        attraction = self.config.drug.attraction_radius
        for drug in world.drugs:
            alpha = max(0.2, drug.remaining_fraction(now))
            center = (int(drug.position.x), int(drug.position.y))
            pygame.draw.circle(overlay, (*DRUG_COLOR, int(255 * alpha * 0.8)), center, 8)
            _dashed_circle(overlay, (*DRUG_COLOR, int(255 * alpha * 0.2)), center, attraction, DRUG_DASH, 1)

    def _draw_agents(self, world: World, surface: pygame.Surface) -> None:
        radius = max(1, int(self.config.agent_radius))
        for agent in world.agents:
            if not agent.alive:
                continue
            center = (int(agent.position.x), int(agent.position.y))
            pygame.draw.circle(surface, self.config.team(agent.team).color, center, radius)
            if agent.protected:
                pygame.draw.circle(surface, PROTECTED_COLOR, center, radius + 3, 2)

    def _draw_effects(self, world: World, overlay: pygame.Surface, kind: EffectKind) -> None:
        effects = world.effects
        now = world.now
        radius = self.config.agent_radius
        for effect in effects.of_kind(kind):
            alpha = effects.alpha(effect, now)
            center = (int(effect.position.x), int(effect.position.y))
            if kind is EffectKind.DARKENING:
                pygame.draw.circle(overlay, (*DARKENING_COLOR, int(200 * alpha)), center, int(radius * 3))
            elif kind is EffectKind.MIST:
                mist = effects.mist_radius(effect, now)
                if mist >= 1:
                    pygame.draw.circle(overlay, (*MIST_COLOR, int(140 * alpha)), center, int(mist))
            else:
                size = 6.0 * effects.heart_scale(effect, now)
                rise = 20.0 * effect.age(now)
                points = _heart_points(effect.position.x, effect.position.y - rise, size)
                pygame.draw.polygon(overlay, (*HEART_COLOR, int(255 * alpha)), points)

    def _draw_captions(self, world: World, surface: pygame.Surface) -> None:
        captions = world.captions
        now = world.now
        for bubble in captions.bubbles:
            alpha = int(255 * captions.alpha(bubble, now))
            text = self.caption_font.render(bubble.text, True, self.config.team(bubble.team).color)
            box = text.get_rect()
            box.inflate_ip(12, 8)
            box.center = (int(bubble.position.x), int(bubble.position.y))
            panel = pygame.Surface(box.size, pygame.SRCALPHA)
            pygame.draw.rect(panel, (*BUBBLE_BG, int(alpha * 0.9)), panel.get_rect(), border_radius=6)
            pygame.draw.rect(panel, (*BUBBLE_BORDER, alpha), panel.get_rect(), 1, border_radius=6)
            text.set_alpha(alpha)
            panel.blit(text, text.get_rect(center=panel.get_rect().center))
            surface.blit(panel, box)

    def _draw_hud(self, world: World, surface: pygame.Surface) -> None:
        metrics = world.metrics
        reindeer = self.config.team(0)
        rabbit = self.config.team(1)
        if metrics is None:
            counts = (len(world.living(0)), len(world.living(1)))
            powers = (0.0, 0.0)
        else:
            counts = (metrics.reindeer, metrics.rabbits)
            powers = (metrics.reindeer_avg_power, metrics.rabbit_avg_power)
        lines = [
            (f"{reindeer.name}: {counts[0]}  avg power {powers[0]:.2f}", reindeer.color),
            (f"{rabbit.name}: {counts[1]}  avg power {powers[1]:.2f}", rabbit.color),
            (f"Drugs: {len(world.drugs)}   t={world.now:.1f}s   {world.phase.value}", HUD_COLOR),
        ]
        y = 10
        for text, color in lines:
            surface.blit(self.font.render(text, True, color), (10, y))
            y += 20

    def _draw_ending(self, world: World, surface: pygame.Surface) -> None:
        outcome = world.outcome
        shade = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
        shade.fill(ENDING_OVERLAY)
        surface.blit(shade, (0, 0))
        width, height = surface.get_size()
        title = self.big_font.render(outcome.label, True, ENDING_TEXT)
        quote = self.quote_font.render(outcome.quote, True, ENDING_TEXT)
        surface.blit(title, title.get_rect(center=(width // 2, height // 2 - 20)))
        surface.blit(quote, quote.get_rect(center=(width // 2, height // 2 + 30)))
