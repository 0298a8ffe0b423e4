# storefront/domain/category_graph.py
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Mapping, Set

from storefront.domain.errors import IntegrityGuardError
from storefront.utils.settings import CATEGORY_TREE_MAX_DEPTH, CATEGORY_DESCENDANTS_MAX_DEPTH
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

TREE_FIELDS = (
    "id",
    "name",
    "slug",
    "type",
    "description",
    "image",
    "is_active",
    "parent_id",
    "created_at",
    "updated_at",
)


class CategoryGraphResolver:
    """
    Drzewo i potomkowie kategorii z plaskiej listy rekordow.

    Graf parent_id edytuje admin przez zwykly CRUD, wiec moze miec cykle
    albo byc bardzo gleboki. Kazde przejscie ma zbior odwiedzonych i licznik
    glebokosci. Listing degraduje sie lagodnie (ucina galaz + warning),
    wywolania krytyczne (strict=True) dostaja IntegrityGuardError.

    Rekordy to mapy z co najmniej "id" i "parent_id".
    """

    def __init__(self, categories: Iterable[Mapping[str, Any]]):
        self.records: Dict[int, Mapping[str, Any]] = {}
        self.children: Dict[int | None, List[Mapping[str, Any]]] = defaultdict(list)

        # jeden przebieg O(n), indeks po parent_id
        for cat in categories:
            self.records[cat["id"]] = cat
            self.children[cat.get("parent_id")].append(cat)

    # =====================================================
    # TREE
    # =====================================================
    def build_tree(self, max_depth: int | None = None) -> List[Dict[str, Any]]:
        max_depth = CATEGORY_TREE_MAX_DEPTH if max_depth is None else max_depth
        placed: Set[int] = set()

        tree = self._build_level(None, 1, max_depth, placed)

        unreachable = len(self.records) - len(placed)
        if unreachable > 0:
            logger.warning(
                f"{unreachable} categories not reachable from any root "
                f"(cycle, missing parent or truncated branch)"
            )

        return tree

    def _build_level(
        self,
        parent_id: int | None,
        depth: int,
        max_depth: int,
        placed: Set[int],
    ) -> List[Dict[str, Any]]:
        level = []

        for cat in self.children.get(parent_id, []):
            cat_id = cat["id"]
            if cat_id in placed:
                logger.warning(f"Cycle detected in category tree at category {cat_id}, branch skipped")
                continue
            placed.add(cat_id)

            node = {field: cat.get(field) for field in TREE_FIELDS}

            if self.children.get(cat_id):
                if depth >= max_depth:
                    logger.warning(
                        f"Category tree truncated at category {cat_id}: max depth {max_depth} reached"
                    )
                else:
                    grandchildren = self._build_level(cat_id, depth + 1, max_depth, placed)
                    if grandchildren:
                        node["children"] = grandchildren

            level.append(node)

        return level

    # =====================================================
    # DESCENDANTS
    # =====================================================
    def descendants_of(
        self,
        category_id: int,
        max_depth: int | None = None,
        strict: bool = False,
    ) -> Set[int]:
        """
        Wszystkie kategorie osiagalne z category_id po linkach dzieci
        (bez samego category_id). Nieznane id -> pusty zbior.
        """
        max_depth = CATEGORY_DESCENDANTS_MAX_DEPTH if max_depth is None else max_depth

        found: Set[int] = set()
        visited: Set[int] = {category_id}
        # iteracyjnie, zeby nie zalezec od limitu rekurencji
        stack = [(category_id, 0)]

        while stack:
            node_id, depth = stack.pop()
            kids = self.children.get(node_id, [])

            if kids and depth >= max_depth:
                self._guard_tripped(
                    category_id, f"max depth {max_depth} reached below category {node_id}", strict
                )
                continue

            for child in kids:
                child_id = child["id"]
                if child_id in visited:
                    self._guard_tripped(
                        category_id, f"cycle through category {child_id}", strict
                    )
                    continue
                visited.add(child_id)
                found.add(child_id)
                stack.append((child_id, depth + 1))

        return found

    def _guard_tripped(self, category_id: int, reason: str, strict: bool):
        logger.warning(f"Descendant resolution for category {category_id} halted: {reason}")
        if strict:
            raise IntegrityGuardError(category_id, reason)
