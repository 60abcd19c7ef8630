"""Built-in feature checkers, one module per feature category.

Importing this package registers every checker in the process-wide registry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from solengine.checking import get_checker, get_enabled_checkers
from solengine.features import code_style, control_flow, data_structures, functions, mechanisms, object_oriented
from solengine.schema import FeatureType

if TYPE_CHECKING:
    from collections.abc import Iterable

    from solengine.checking import FeatureChecker

__all__ = [
    "code_style",
    "control_flow",
    "data_structures",
    "default_checkers",
    "functions",
    "mechanisms",
    "object_oriented",
]


def default_checkers(features: Iterable[str] | None = None) -> list[FeatureChecker]:
    """Built-in checkers in catalog order, or only those named in *features*.

    Unknown names in *features* are logged and skipped.
    """
    if features is None:
        return [get_checker(feature) for feature in FeatureType]
    return get_enabled_checkers(features)
