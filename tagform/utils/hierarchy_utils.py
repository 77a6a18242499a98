from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from tagform.constants.utils import PATH_SEPARATOR


def build_path(parent_path: Optional[str], node_id: str) -> str:
    if not parent_path:
        return node_id
    return f"{parent_path}{PATH_SEPARATOR}{node_id}"


def compute_paths(parent_by_id: Dict[str, Optional[str]]) -> Dict[str, str]:
    """Materialize the path of every node from an ``id -> parent_id`` map.

    A parent that is not in the map is treated as missing and the node is
    rooted. Raises ValueError when the map contains a cycle.
    """
    paths: Dict[str, str] = {}

    for node_id in parent_by_id:
        chain: List[str] = []
        on_chain = set()
        current = node_id
        # Climb until a rooted or already resolved ancestor
        while current in parent_by_id and current not in paths:
            if current in on_chain:
                raise ValueError(f"cycle detected at {current}")
            on_chain.add(current)
            chain.append(current)
            current = parent_by_id[current]

        parent_path = paths.get(current)
        for chain_id in reversed(chain):
            parent_path = build_path(parent_path, chain_id)
            paths[chain_id] = parent_path
    return paths


def is_same_or_descendant(parent_by_id: Dict[str, Optional[str]], node_id: str, ancestor_id: str) -> bool:
    """True when ``node_id`` is ``ancestor_id`` or sits somewhere below it."""
    seen = set()
    current = node_id
    while current is not None and current not in seen:
        if current == ancestor_id:
            return True
        seen.add(current)
        current = parent_by_id.get(current)
    return False


def group_by_parent(items: Iterable) -> Dict[Optional[str], List]:
    groups: Dict[Optional[str], List] = defaultdict(list)
    for item in items:
        groups[item.parent_id].append(item)
    for siblings in groups.values():
        siblings.sort(key=lambda q: q.order)
    return groups


def flatten_in_order(items: Iterable) -> List:
    """Depth-first listing: each parent is followed by its children, siblings by order."""
    groups = group_by_parent(items)
    known = {item.id for siblings in groups.values() for item in siblings}
    ordered: List = []

    def walk(start: List):
        stack = list(reversed(start))
        while stack:
            item = stack.pop()
            ordered.append(item)
            stack.extend(reversed(groups.get(item.id, [])))

    walk(groups.get(None, []))
    # Orphans whose parent is outside the given set still get listed
    for parent_id, siblings in list(groups.items()):
        if parent_id is not None and parent_id not in known:
            walk(siblings)
    return ordered


def build_tree(nodes: List[dict]) -> List[dict]:
    """Nest serialized questions under ``children``, ordered at every level."""
    by_id = {node["id"]: node for node in nodes}
    roots: List[dict] = []

    for node in nodes:
        node["children"] = []

    for node in nodes:
        parent = by_id.get(node.get("parent_id"))
        if parent is not None:
            parent["children"].append(node)
        else:
            roots.append(node)

    levels = [roots]
    while levels:
        level = levels.pop()
        level.sort(key=lambda n: n["order"])
        levels.extend(n["children"] for n in level)
    return roots
