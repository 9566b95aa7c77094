#!/usr/bin/env python3
"""
Hierarchy Module
Root resolution, cycle detection and instantiation walks over decoded nodes.
"""

import logging
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .scene_data import DecodedNode, DecodedScene
from .transforms import compose_trs

logger = logging.getLogger(__name__)


def resolve_root_nodes(nodes: Sequence[DecodedNode],
                       default_scene_nodes: Optional[Sequence[int]] = None) -> List[int]:
    """Determine which nodes are hierarchy roots

    If the document declares a default scene, its node list is the root set
    as given, even when some of those nodes are also children elsewhere.
    Duplicate and out-of-range entries are removed so the result stays a
    valid, unique index set.

    Without a default scene every node that is never referenced as a child
    is a root. Out-of-range child indices are ignored.

    Args:
        nodes: Decoded nodes in document order
        default_scene_nodes: Node list of the default scene, None if the
            document declares no default scene

    Returns:
        list: Root node indices
    """
    if default_scene_nodes is not None:
        roots = []
        seen = set()
        for index in default_scene_nodes:
            if not 0 <= index < len(nodes):
                logger.warning("Default scene references missing node %d, ignoring", index)
                continue
            if index in seen:
                continue
            seen.add(index)
            roots.append(index)
        return roots

    is_child = [False] * len(nodes)
    for node in nodes:
        for child_index in node.children:
            if 0 <= child_index < len(is_child):
                is_child[child_index] = True

    return [index for index, marked in enumerate(is_child) if not marked]


def find_cycles(nodes: Sequence[DecodedNode]) -> List[int]:
    """Find nodes that lie on a cycle of child references

    Uses an iterative Tarjan strongly-connected-components pass. A node is on
    a cycle when its component has more than one member or it lists itself
    as a child.

    Args:
        nodes: Decoded nodes in document order

    Returns:
        list: Sorted indices of nodes on a cycle (empty for a proper forest)
    """
    count = len(nodes)
    index_of = [-1] * count
    lowlink = [0] * count
    on_stack = [False] * count
    stack: List[int] = []
    cyclic: List[int] = []
    counter = 0

    def successors(i: int) -> List[int]:
        return [c for c in nodes[i].children if 0 <= c < count]

    for start in range(count):
        if index_of[start] != -1:
            continue

        work = [(start, iter(successors(start)))]
        index_of[start] = lowlink[start] = counter
        counter += 1
        stack.append(start)
        on_stack[start] = True

        while work:
            current, children = work[-1]
            advanced = False
            for child in children:
                if index_of[child] == -1:
                    index_of[child] = lowlink[child] = counter
                    counter += 1
                    stack.append(child)
                    on_stack[child] = True
                    work.append((child, iter(successors(child))))
                    advanced = True
                    break
                if on_stack[child]:
                    lowlink[current] = min(lowlink[current], index_of[child])
            if advanced:
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[current])

            if lowlink[current] == index_of[current]:
                component = []
                while True:
                    member = stack.pop()
                    on_stack[member] = False
                    component.append(member)
                    if member == current:
                        break
                if len(component) > 1 or current in nodes[current].children:
                    cyclic.extend(component)

    return sorted(cyclic)


def iter_instances(scene: DecodedScene) -> Iterator[Tuple[int, np.ndarray]]:
    """Walk the hierarchy from each root, yielding world transforms

    Nodes are visited depth-first in child order. A node already on the
    current path is not entered again, so cyclic documents terminate. A node
    reachable from several parents is yielded once per path.

    Args:
        scene: Decoded scene

    Yields:
        tuple: (node_index, world_matrix) with a 4x4 float64 world matrix
    """
    node_count = len(scene.nodes)

    def local_matrix(index: int) -> np.ndarray:
        node = scene.nodes[index]
        return compose_trs(node.translation, node.rotation, node.scale)

    for root_index in scene.root_nodes:
        root_world = local_matrix(root_index)
        yield root_index, root_world

        on_path = {root_index}
        stack = [(root_index, root_world, iter(scene.nodes[root_index].children))]
        while stack:
            index, world, children = stack[-1]
            for child_index in children:
                if not 0 <= child_index < node_count:
                    continue
                if child_index in on_path:
                    logger.debug("Skipping cyclic reference %d -> %d", index, child_index)
                    continue
                child_world = world @ local_matrix(child_index)
                yield child_index, child_world
                on_path.add(child_index)
                stack.append((child_index, child_world, iter(scene.nodes[child_index].children)))
                break
            else:
                stack.pop()
                on_path.discard(index)
