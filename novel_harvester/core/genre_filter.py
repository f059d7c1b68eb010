from typing import Any, Iterable, List, Optional


def _category_matches(category: Any, target_genres: List[str]) -> bool:
    if not category:
        return False

    # Plain string categories only match by membership
    if isinstance(category, str):
        return category in target_genres

    if not isinstance(category, dict):
        return False

    slug = str(category.get("slug") or category.get("id") or "")
    name = str(category.get("name") or "")

    for target in target_genres:
        if slug == target or name.lower() == target.lower():
            return True
        # Loose containment in both directions, e.g. "do-thi" vs "truyen-do-thi"
        if slug and (slug in target or target in slug):
            return True
    return False


def matches(categories: Optional[Iterable[Any]], target_genres: Optional[Iterable[str]] = None) -> bool:
    """
    Returns True if at least one category matches a target genre.
    An empty or missing target set matches any non-empty category list.
    """
    categories = list(categories or [])
    if not categories:
        return False

    targets = list(target_genres or [])
    if not targets:
        return True

    return any(_category_matches(category, targets) for category in categories)


def filter_categories(categories: Optional[Iterable[Any]], target_genres: Optional[Iterable[str]] = None) -> List[Any]:
    """Returns the categories that match a target genre, or all of them when no targets are set."""
    categories = list(categories or [])
    targets = list(target_genres or [])
    if not targets:
        return categories

    return [category for category in categories if _category_matches(category, targets)]


def matched_targets(categories: Optional[Iterable[Any]], target_genres: Optional[Iterable[str]]) -> List[str]:
    """Returns the target genres hit by at least one of the categories, in target order."""
    categories = list(categories or [])
    return [target for target in (target_genres or []) if any(_category_matches(c, [target]) for c in categories)]
