"""Interaction layer: element addressing and the action executor.

Usage:
    from playwise.actions import ActionExecutor, BySelector

    actions = ActionExecutor(page)
    await actions.click(BySelector("#login-button"))
"""

from playwise.actions.executor import ActionExecutor
from playwise.actions.locatable import (
    ByHandle,
    BySelector,
    Locatable,
    describe_locatable,
    resolve_locatable,
)

__all__ = [
    "ActionExecutor",
    "ByHandle",
    "BySelector",
    "Locatable",
    "describe_locatable",
    "resolve_locatable",
]
