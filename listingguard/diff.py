"""
Change-set helpers for update rules.

Update rules on properties grant narrow exceptions (bump the view
counter, save or unsave a listing) only when the write touches a single
field. The helpers here compute which fields changed and check the two
permitted shapes of change.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from typing import Any

_MISSING = object()


def same_value(a: Any, b: Any) -> bool:
    """
    Compare two field values without numeric coercion.

    ``1``, ``1.0`` and ``True`` are all different values here. Lists and
    dicts are compared element by element under the same rule.
    """
    if type(a) is not type(b):
        return False
    if isinstance(a, list):
        return len(a) == len(b) and all(same_value(x, y) for x, y in zip(a, b))
    if isinstance(a, dict):
        return a.keys() == b.keys() and all(same_value(a[k], b[k]) for k in a)
    return a == b


def changed_fields(
    existing: Mapping[str, Any] | None,
    proposed: Mapping[str, Any] | None,
) -> frozenset[str]:
    """
    Return the names of fields that differ between two document states.

    A field counts as changed if it was added, removed, or its value
    differs in type or content.

    Example:
        >>> changed_fields({"views": 1, "title": "Farm"}, {"views": 2, "title": "Farm"})
        frozenset({'views'})
    """
    before = existing or {}
    after = proposed or {}
    keys = set(before) | set(after)
    return frozenset(
        key for key in keys
        if not same_value(before.get(key, _MISSING), after.get(key, _MISSING))
    )


def is_single_increment(before: Any, after: Any) -> bool:
    """Check that ``after`` is an integer exactly one above ``before``."""
    for value in (before, after):
        if isinstance(value, bool) or not isinstance(value, int):
            return False
    return after == before + 1


def validates_single_element_change(existing: Any, proposed: Any) -> bool:
    """
    Check that a list field changed by exactly one added or removed element.

    ``existing`` is None only when there is no prior document; any list
    is then accepted. Otherwise both values must be lists compared as
    multisets: an add introduces exactly one id not already present and
    drops nothing, a remove drops exactly one occurrence and adds nothing.
    Element order does not matter.

    Example:
        >>> validates_single_element_change(["u1"], ["u1", "u2"])
        True
        >>> validates_single_element_change(["u1"], ["u2"])
        False
    """
    if not isinstance(proposed, list):
        return False
    if existing is None:
        return True
    if not isinstance(existing, list):
        return False

    try:
        before = Counter(existing)
        after = Counter(proposed)
    except TypeError:
        # Unhashable elements are not subject ids.
        return False

    added = after - before
    removed = before - after

    if len(proposed) == len(existing) + 1:
        return added.total() == 1 and not removed and next(iter(added)) not in before
    if len(proposed) == len(existing) - 1:
        return removed.total() == 1 and not added
    return False
