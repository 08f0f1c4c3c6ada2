# wobj/scene/flatten.py
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from wobj.scene.types import SceneNode


@dataclass(frozen=True, slots=True, eq=False)
class FlattenedNode:
    node: SceneNode
    index: int
    first_child: int  # start of the contiguous child block

    @property
    def child_count(self) -> int:
        return len(self.node.children)


@dataclass
class FlattenedScene:
    nodes: List[FlattenedNode]
    # Only nodes without meshes; mesh nodes go through their "_auto" bone.
    node_map: Dict[str, int]

    def __len__(self) -> int:
        return len(self.nodes)

    def index_of(self, name: str) -> Optional[int]:
        return self.node_map.get(name)


def flatten_scene(root: SceneNode) -> FlattenedScene:
    """
    Lay the tree out as an array where each node's children occupy one
    contiguous block. Nodes are visited in pre-order; on visit a node
    reserves the next free run of slots for its children, while its own
    slot was reserved earlier by its parent. The root is slot 0.
    """
    slots: List[Optional[FlattenedNode]] = [None]
    node_map: Dict[str, int] = {}
    next_free = 1

    stack: List[Tuple[SceneNode, int]] = [(root, 0)]
    while stack:
        node, index = stack.pop()

        first_child = next_free
        next_free += len(node.children)
        if len(slots) < next_free:
            slots.extend([None] * (next_free - len(slots)))

        if not node.meshes and node.name not in node_map:
            node_map[node.name] = index

        slots[index] = FlattenedNode(node, index, first_child)

        for offset in reversed(range(len(node.children))):
            stack.append((node.children[offset], first_child + offset))

    nodes = [slot for slot in slots if slot is not None]
    return FlattenedScene(nodes=nodes, node_map=node_map)
