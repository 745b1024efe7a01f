"""
Layer introspection.

Read-only, order-preserving snapshots of a layer stack for the layers
log. The introspector subscribes to the stack's change notifications and
regenerates the whole snapshot on each one.
"""

import json
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from .events import EditorEvent, EventType
from .objects import SceneObject
from .stack import LayerStack

logger = logging.getLogger(__name__)


def _freeze(value):
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value):
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


@dataclass(frozen=True)
class LayerRecord:
    """Flattened view of one scene object at snapshot time."""

    z_index: int
    id: int
    kind: str
    position: Mapping[str, float]
    size: Mapping[str, float]
    scale: Mapping[str, float]
    rotation: float
    selectable: bool
    attributes: Mapping[str, Any]

    @classmethod
    def from_object(cls, obj: SceneObject, z_index: int) -> "LayerRecord":
        return cls(
            z_index=z_index,
            id=obj.id,
            kind=obj.kind.value,
            position=MappingProxyType(obj.position.to_dict()),
            size=MappingProxyType(obj.size.to_dict()),
            scale=MappingProxyType(obj.scale.to_dict()),
            rotation=obj.rotation,
            selectable=obj.selectable,
            attributes=_freeze(obj.attributes()),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "position": dict(self.position),
            "size": dict(self.size),
            "scale": dict(self.scale),
            "rotation": self.rotation,
            "selectable": self.selectable,
            "z_index": self.z_index,
            **_thaw(self.attributes),
        }


def snapshot(objects: Iterable[SceneObject]) -> Tuple[LayerRecord, ...]:
    """Project objects in paint order; ``z_index`` is the position."""
    return tuple(
        LayerRecord.from_object(obj, z_index) for z_index, obj in enumerate(objects)
    )


def dump_snapshot(records: Iterable[LayerRecord]) -> str:
    """Human-readable JSON dump of a snapshot."""
    return json.dumps(
        [record.to_dict() for record in records], indent=2, ensure_ascii=False
    )


class LayerIntrospector:
    """
    Keeps an up-to-date snapshot of a layer stack.

    One regeneration per ``STACK_CHANGED`` notification; the stack
    coalesces the changes of a single operation into one notification.
    """

    def __init__(self, stack: LayerStack):
        self.stack = stack
        self.generation = 0
        self._snapshot: Tuple[LayerRecord, ...] = ()
        self._attached = False
        self.attach()

    @property
    def snapshot(self) -> Tuple[LayerRecord, ...]:
        return self._snapshot

    def attach(self):
        if not self._attached:
            self.stack.events.on(EventType.STACK_CHANGED, self._on_stack_changed)
            self._attached = True
            self.refresh()

    def detach(self):
        if self._attached:
            self.stack.events.off(EventType.STACK_CHANGED, self._on_stack_changed)
            self._attached = False

    def refresh(self) -> Tuple[LayerRecord, ...]:
        self._snapshot = snapshot(self.stack)
        self.generation += 1
        logger.debug(
            "Layer snapshot #%d: %d layer(s)", self.generation, len(self._snapshot)
        )
        self.stack.events.emit(
            EditorEvent(
                EventType.SNAPSHOT_UPDATED,
                {"generation": self.generation, "num_layers": len(self._snapshot)},
            )
        )
        return self._snapshot

    def as_dicts(self) -> List[Dict[str, Any]]:
        return [record.to_dict() for record in self._snapshot]

    def dump(self) -> str:
        return dump_snapshot(self._snapshot)

    def _on_stack_changed(self, event: EditorEvent):
        self.refresh()
