"""
Disseny manual del diagrama al·luvial (continent -> país -> categoria).

Tot és pur: a partir de nodes, arestes i paràmetres calculo les posicions
dels nodes i la geometria (Bézier cúbica) de cada enllaç. El dibuix es fa
a charts.py; aquí no hi ha cap estat que sobrevisqui entre crides.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum, IntEnum

from structlog import get_logger

log = get_logger()


# -----------------------------
# Errors
# -----------------------------
class AlluvialError(Exception):
    pass


class MissingReferenceError(AlluvialError):
    """Una aresta apunta a un node que no existeix."""


class ConfigurationError(AlluvialError):
    """Els paràmetres no permeten una col·locació vàlida."""


# -----------------------------
# Model
# -----------------------------
class Tier(IntEnum):
    ROOT = 0  # continent
    MID = 1  # país
    LEAF = 2  # categoria


class OverflowPolicy(str, Enum):
    RAISE = "raise"
    SCALE = "scale"
    ALLOW = "allow"


@dataclass(frozen=True)
class Node:
    id: str
    tier: Tier


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    weight: float


@dataclass(frozen=True)
class Position:
    x: float
    y: float


@dataclass(frozen=True)
class LayoutParams:
    width: float
    height: float
    node_width: float = 100
    node_height: float = 30
    # None -> height / 10, com el diagrama original
    vertical_spacing: float | None = None
    top_padding: float = 10
    tier_count: int = 3
    min_stroke_width: float = 2
    stroke_scale: float = 1000
    overflow: OverflowPolicy = OverflowPolicy.RAISE

    @property
    def spacing(self) -> float:
        if self.vertical_spacing is None:
            return self.height / 10
        return self.vertical_spacing


@dataclass(frozen=True)
class CurveGeometry:
    source: str
    target: str
    weight: float
    start: Position
    control1: Position
    control2: Position
    end: Position
    stroke_width: float

    def svg_path(self) -> str:
        s, c1, c2, e = self.start, self.control1, self.control2, self.end
        return f"M{s.x:g},{s.y:g} C{c1.x:g},{c1.y:g} {c2.x:g},{c2.y:g} {e.x:g},{e.y:g}"

    def point_at(self, t: float) -> Position:
        u = 1 - t
        pts = (self.start, self.control1, self.control2, self.end)
        coef = (u**3, 3 * u**2 * t, 3 * u * t**2, t**3)
        return Position(
            x=sum(k * p.x for k, p in zip(coef, pts)),
            y=sum(k * p.y for k, p in zip(coef, pts)),
        )


@dataclass(frozen=True)
class AlluvialLayout:
    positions: dict[str, Position]
    curves: list[CurveGeometry] = field(default_factory=list)


# -----------------------------
# Validació
# -----------------------------
def _check_params(params: LayoutParams) -> None:
    if params.width <= 0 or params.height <= 0:
        raise ConfigurationError(f"Canvas buit: {params.width}x{params.height}")
    if params.tier_count < 1:
        raise ConfigurationError(f"tier_count ha de ser >= 1 (és {params.tier_count})")
    if params.spacing <= 0:
        raise ConfigurationError(f"Espaiat vertical no positiu: {params.spacing}")
    if params.spacing < params.node_height:
        raise ConfigurationError(
            f"Espaiat vertical {params.spacing} px menor que l'alçada del node ({params.node_height} px)"
        )
    if params.stroke_scale <= 0:
        raise ConfigurationError(f"stroke_scale no positiu: {params.stroke_scale}")


def _group_by_tier(nodes: list[Node], tier_count: int) -> dict[int, list[Node]]:
    groups: dict[int, list[Node]] = defaultdict(list)
    seen = set()
    for node in nodes:
        if node.id in seen:
            raise ConfigurationError(f"Node duplicat: {node.id!r}")
        seen.add(node.id)
        t = int(node.tier)
        if t < 0 or t >= tier_count:
            raise ConfigurationError(f"Node {node.id!r} al nivell {t}, fora de 0..{tier_count - 1}")
        groups[t].append(node)
    return groups


def _check_edges(edges: list[Edge], tiers: dict[str, int]) -> None:
    for e in edges:
        for end in (e.source, e.target):
            if end not in tiers:
                raise MissingReferenceError(f"Aresta {e.source!r} -> {e.target!r}: node {end!r} inexistent")
        if tiers[e.target] != tiers[e.source] + 1:
            raise ConfigurationError(
                f"Aresta {e.source!r} -> {e.target!r} no connecta nivells consecutius"
            )
        if not e.weight >= 0:  # també NaN
            raise ConfigurationError(f"Pes negatiu o NaN a {e.source!r} -> {e.target!r}: {e.weight}")


# -----------------------------
# Càlcul
# -----------------------------
def compute_layout(nodes: list[Node], edges: list[Edge], params: LayoutParams) -> dict[str, Position]:
    """
    x depèn només del nivell; y de l'ordre d'aparició dins el nivell.
    Si un nivell no hi cap, s'aplica params.overflow.
    """
    _check_params(params)
    groups = _group_by_tier(nodes, params.tier_count)
    _check_edges(edges, {n.id: int(n.tier) for n in nodes})

    spacing = params.spacing
    max_count = max((len(g) for g in groups.values()), default=0)
    if spacing * max_count > params.height:
        if params.overflow == OverflowPolicy.RAISE:
            raise ConfigurationError(
                f"{max_count} nodes x {spacing} px no hi caben en {params.height} px d'alçada"
            )
        if params.overflow == OverflowPolicy.SCALE:
            spacing = params.height / max_count
            if spacing < params.node_height:
                raise ConfigurationError(
                    f"{max_count} nodes no hi caben sense solapar-se: espaiat {spacing:.1f} px < {params.node_height} px"
                )
        else:
            log.warning("alluvial.overflow", max_count=max_count, spacing=spacing, height=params.height)

    tier_width = params.width / params.tier_count
    positions = {}
    for t in sorted(groups):
        for i, node in enumerate(groups[t]):
            positions[node.id] = Position(x=t * tier_width, y=i * spacing + params.top_padding)
    return positions


def stroke_width(weight: float, params: LayoutParams) -> float:
    return max(params.min_stroke_width, weight / params.stroke_scale)


def compute_edge_curve(edge: Edge, positions: dict[str, Position], params: LayoutParams) -> CurveGeometry:
    try:
        src = positions[edge.source]
        tgt = positions[edge.target]
    except KeyError as e:
        raise MissingReferenceError(f"Aresta {edge.source!r} -> {edge.target!r}: sense posició per {e.args[0]!r}") from e

    half = params.node_height / 2
    start = Position(src.x + params.node_width, src.y + half)
    end = Position(tgt.x, tgt.y + half)
    mid_x = (start.x + end.x) / 2
    return CurveGeometry(
        source=edge.source,
        target=edge.target,
        weight=edge.weight,
        start=start,
        control1=Position(mid_x, start.y),
        control2=Position(mid_x, end.y),
        end=end,
        stroke_width=stroke_width(edge.weight, params),
    )


def compute_alluvial(nodes: list[Node], edges: list[Edge], params: LayoutParams) -> AlluvialLayout:
    positions = compute_layout(nodes, edges, params)
    curves = [compute_edge_curve(e, positions, params) for e in edges]
    log.info("alluvial.layout", nodes=len(positions), edges=len(curves))
    return AlluvialLayout(positions=positions, curves=curves)
