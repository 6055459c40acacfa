"""Element hierarchy: an arena of windows and elements indexed by integer id.

Parent, child and window relations are stored as ids and resolved through the
Hierarchy, never as direct references between elements.

Two JSON shapes are accepted and normalised by one builder:

  Nested (a dump of a live view tree):
    {"device": {"scaled_density": 2.0},
     "windows": [{"id": 0, "bounds": [0, 0, 1080, 1920],
                  "root": {"id": 1, "class_name": "FrameLayout",
                           "children": [{"id": 2, "text": "Hello", ...}]}}]}

  Flat (a serialized node list):
    {"device": {...},
     "windows": [{"id": 0, "bounds": [...], "root_id": 1}],
     "nodes": [{"id": 1, "window_id": 0}, {"id": 2, "parent": 1, ...}]}

Node fields: id, class_name, role ('text' | 'toggle' | 'none'), visible,
enabled, text / hint_text (a string, or {"text": ..., "spans": [...]}),
text_color, hint_text_color, background_color ('#rrggbb' / '#aarrggbb'),
text_size (px), bold, character_locations ([[l, t, r, b], ...]),
bounds ([l, t, r, b]), potentially_obscured, against_scrollable_edge.
A span is {"start": 0, "end": 5, "color": "#ff0000", "kind": "foreground"}.
"""

from __future__ import annotations

import enum
import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from contrast_checker.core.color import parse_color
from contrast_checker.core.types import EMPTY_RECT, ColorSpan, Rect, SpanKind, StyledText


class HierarchyError(ValueError):
    """A hierarchy payload is structurally invalid."""


class TextRole(enum.Enum):
    NONE = 'none'
    TEXT = 'text'
    TOGGLE = 'toggle'


@dataclass(frozen=True)
class Element:
    id: int
    window_id: int
    parent_id: int | None = None
    child_ids: tuple[int, ...] = ()
    class_name: str = ''
    text_role: TextRole = TextRole.NONE
    visible: bool = True
    enabled: bool = True
    text: StyledText | None = None
    hint_text: StyledText | None = None
    text_color: int | None = None
    hint_text_color: int | None = None
    background_color: int | None = None
    text_size: float | None = None
    bold: bool = False
    text_character_locations: tuple[Rect, ...] = ()
    bounds: Rect = EMPTY_RECT
    potentially_obscured: bool | None = None
    against_scrollable_edge: bool = False


@dataclass(frozen=True)
class Window:
    id: int
    root_id: int | None
    bounds: Rect = EMPTY_RECT
    layer: int = 0


@dataclass(frozen=True)
class DeviceState:
    scaled_density: float = 1.0
    screen_width: int = 0
    screen_height: int = 0


@dataclass(frozen=True)
class Hierarchy:
    """Arena of windows and elements. Elements are stored in drawing order."""

    windows: Mapping[int, Window]
    elements: Mapping[int, Element]
    device: DeviceState = field(default_factory=DeviceState)

    def element(self, element_id: int) -> Element:
        return self.elements[element_id]

    def parent(self, element: Element) -> Element | None:
        return None if element.parent_id is None else self.elements[element.parent_id]

    def children(self, element: Element) -> list[Element]:
        return [self.elements[i] for i in element.child_ids]

    def window(self, element: Element) -> Window:
        return self.windows[element.window_id]

    def ancestors(self, element: Element) -> Iterator[Element]:
        current = self.parent(element)
        while current is not None:
            yield current
            current = self.parent(current)

    def walk(self, root_id: int | None = None) -> Iterator[Element]:
        """Pre-order traversal from ``root_id``, or of every window by layer."""
        if root_id is not None:
            roots = [root_id]
        else:
            ordered = sorted(self.windows.values(), key=lambda w: (w.layer, w.id))
            roots = [w.root_id for w in ordered if w.root_id is not None]
        stack = list(reversed(roots))
        while stack:
            element = self.elements[stack.pop()]
            yield element
            stack.extend(reversed(element.child_ids))

    def is_potentially_obscured(self, element: Element) -> bool:
        """Whether other on-screen content may be drawn over ``element``.

        Uses the element's own flag when the source provided one. Otherwise any
        visible element drawn later in the same window, which is neither an
        ancestor nor a descendant, and overlaps the element's bounds counts.
        """
        if element.potentially_obscured is not None:
            return element.potentially_obscured

        window = self.window(element)
        order = [e.id for e in self.walk(window.root_id)] if window.root_id is not None else []
        if element.id not in order:
            return False
        ancestor_ids = {a.id for a in self.ancestors(element)}
        for later_id in order[order.index(element.id) + 1 :]:
            later = self.elements[later_id]
            if later_id in ancestor_ids or not later.visible:
                continue
            if any(a.id == element.id for a in self.ancestors(later)):
                continue
            if later.bounds.intersects(element.bounds):
                return True
        return False


@dataclass(frozen=True)
class NestedSource:
    """Windows whose ``root`` holds nested ``children`` nodes."""

    payload: Mapping[str, Any]


@dataclass(frozen=True)
class FlatSource:
    """Windows with ``root_id`` plus a flat ``nodes`` list linked by ``parent`` ids."""

    payload: Mapping[str, Any]


HierarchySource = NestedSource | FlatSource


def _rect(value: Any) -> Rect:
    if value is None:
        return EMPTY_RECT
    if len(value) != 4:
        raise HierarchyError(f'Bounds must have 4 values, got {value!r}')
    return Rect(*(int(v) for v in value))


def _color(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return parse_color(value)
    except ValueError as e:
        raise HierarchyError(str(e)) from None


def _styled_text(value: Any) -> StyledText | None:
    if value is None:
        return None
    if isinstance(value, str):
        return StyledText(value)
    spans = []
    for s in value.get('spans', []):
        try:
            spans.append(
                ColorSpan(
                    start=int(s['start']),
                    end=int(s['end']),
                    color=parse_color(s['color']),
                    kind=SpanKind(s.get('kind', 'foreground')),
                )
            )
        except (KeyError, ValueError) as e:
            raise HierarchyError(f'Malformed span {s!r}: {e}') from None
    try:
        return StyledText(value.get('text', ''), tuple(spans))
    except ValueError as e:
        raise HierarchyError(str(e)) from None


def _element(node: Mapping[str, Any], window_id: int, parent_id: int | None, child_ids: tuple[int, ...]) -> Element:
    try:
        role = TextRole(node.get('role', 'none'))
    except ValueError:
        raise HierarchyError(f'Unknown role {node.get("role")!r} on node {node.get("id")}') from None
    text_size = node.get('text_size')
    return Element(
        id=int(node['id']),
        window_id=window_id,
        parent_id=parent_id,
        child_ids=child_ids,
        class_name=node.get('class_name', ''),
        text_role=role,
        visible=bool(node.get('visible', True)),
        enabled=bool(node.get('enabled', True)),
        text=_styled_text(node.get('text')),
        hint_text=_styled_text(node.get('hint_text')),
        text_color=_color(node.get('text_color')),
        hint_text_color=_color(node.get('hint_text_color')),
        background_color=_color(node.get('background_color')),
        text_size=None if text_size is None else float(text_size),
        bold=bool(node.get('bold', False)),
        text_character_locations=tuple(_rect(r) for r in node.get('character_locations', [])),
        bounds=_rect(node.get('bounds')),
        potentially_obscured=node.get('potentially_obscured'),
        against_scrollable_edge=bool(node.get('against_scrollable_edge', False)),
    )


def _flatten_nested(root: Mapping[str, Any], window_id: int) -> Iterator[tuple[Mapping[str, Any], int, int | None]]:
    """Yield (node, window_id, parent_id) in pre-order."""
    stack: list[tuple[Mapping[str, Any], int | None]] = [(root, None)]
    while stack:
        node, parent_id = stack.pop()
        yield node, window_id, parent_id
        for child in reversed(node.get('children', [])):
            stack.append((child, int(node['id'])))


def _check_parent_chains(parents: Mapping[int, int | None]) -> None:
    """Raise HierarchyError if following ``parent`` links ever revisits a node."""
    acyclic: set[int] = set()
    for start in parents:
        chain: list[int] = []
        on_chain: set[int] = set()
        current: int | None = start
        while current is not None and current not in acyclic:
            if current in on_chain:
                raise HierarchyError(f'Parent cycle at node {current}')
            chain.append(current)
            on_chain.add(current)
            current = parents.get(current)
        acyclic.update(chain)


def _source_nodes(source: HierarchySource) -> Iterator[tuple[Mapping[str, Any], int, int | None]]:
    payload = source.payload
    if isinstance(source, NestedSource):
        for w in payload.get('windows', []):
            if w.get('root') is not None:
                yield from _flatten_nested(w['root'], int(w['id']))
        return

    window_of_root = {
        int(w['root_id']): int(w['id']) for w in payload.get('windows', []) if w.get('root_id') is not None
    }
    nodes = payload.get('nodes', [])
    by_id = {int(n['id']): n for n in nodes}
    parents: dict[int, int | None] = {}
    for node in nodes:
        parent_id = node.get('parent')
        if parent_id is not None:
            parent_id = int(parent_id)
            if parent_id not in by_id:
                raise HierarchyError(f'Node {node["id"]} has unknown parent {parent_id}')
        parents[int(node['id'])] = parent_id
    _check_parent_chains(parents)

    for node in nodes:
        parent_id = parents[int(node['id'])]
        window_id = node.get('window_id')
        if window_id is None:
            # Inherit from the nearest ancestor that names its window or roots one.
            current: Mapping[str, Any] | None = node
            while current is not None and window_id is None:
                cid = int(current['id'])
                window_id = current.get('window_id', window_of_root.get(cid))
                pid = parents[cid]
                current = by_id[pid] if pid is not None else None
        if window_id is None:
            raise HierarchyError(f'Node {node["id"]} belongs to no window')
        yield node, int(window_id), parent_id


def build_hierarchy(source: HierarchySource) -> Hierarchy:
    """Build the element arena from either source shape."""
    payload = source.payload
    entries = list(_source_nodes(source))

    child_ids: dict[int, list[int]] = {}
    seen: set[int] = set()
    for node, _window_id, parent_id in entries:
        if 'id' not in node:
            raise HierarchyError(f'Node without id: {node!r}')
        node_id = int(node['id'])
        if node_id in seen:
            raise HierarchyError(f'Duplicate element id {node_id}')
        seen.add(node_id)
        if parent_id is not None:
            child_ids.setdefault(parent_id, []).append(node_id)

    elements = {}
    for node, window_id, parent_id in entries:
        node_id = int(node['id'])
        elements[node_id] = _element(node, window_id, parent_id, tuple(child_ids.get(node_id, [])))

    windows = {}
    for w in payload.get('windows', []):
        window_id = int(w['id'])
        if isinstance(source, NestedSource):
            root_id = int(w['root']['id']) if w.get('root') is not None else None
        else:
            root_id = int(w['root_id']) if w.get('root_id') is not None else None
        if root_id is not None and root_id not in elements:
            raise HierarchyError(f'Window {window_id} has unknown root {root_id}')
        windows[window_id] = Window(
            id=window_id,
            root_id=root_id,
            bounds=_rect(w.get('bounds')),
            layer=int(w.get('layer', 0)),
        )

    for element in elements.values():
        if element.window_id not in windows:
            raise HierarchyError(f'Element {element.id} refers to unknown window {element.window_id}')

    device = payload.get('device', {})
    return Hierarchy(
        windows=windows,
        elements=elements,
        device=DeviceState(
            scaled_density=float(device.get('scaled_density', 1.0)),
            screen_width=int(device.get('screen_width', 0)),
            screen_height=int(device.get('screen_height', 0)),
        ),
    )


def load_hierarchy(path: str) -> Hierarchy:
    """Load a hierarchy JSON file, picking the source shape from its keys."""
    with open(path, encoding='utf-8') as f:
        payload = json.load(f)
    source: HierarchySource = FlatSource(payload) if 'nodes' in payload else NestedSource(payload)
    return build_hierarchy(source)
