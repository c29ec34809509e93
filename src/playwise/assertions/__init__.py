"""Assertion layer: typed comparisons and the hard/soft assertion ledger.

Usage:
    from playwise.assertions import AssertionLedger, Contains, Equals

    ledger.assert_soft(Equals(body["status"], 200), "Expected status to be 200")
    ledger.assert_hard(Contains(banner, "You logged into a secure area!"))
"""

from playwise.assertions.comparisons import (
    Attached,
    Contains,
    Detached,
    Disabled,
    ElementComparison,
    Enabled,
    Equals,
    Evaluation,
    HasAttribute,
    HasText,
    Hidden,
    IsFalse,
    IsNone,
    IsNotNone,
    IsTrue,
    Matches,
    NotEquals,
    ValueComparison,
    Visible,
)
from playwise.assertions.ledger import (
    AssertionKind,
    AssertionLedger,
    AssertionOutcome,
    AssertionRecord,
)

__all__ = [
    "AssertionKind",
    "AssertionLedger",
    "AssertionOutcome",
    "AssertionRecord",
    "Attached",
    "Contains",
    "Detached",
    "Disabled",
    "ElementComparison",
    "Enabled",
    "Equals",
    "Evaluation",
    "HasAttribute",
    "HasText",
    "Hidden",
    "IsFalse",
    "IsNone",
    "IsNotNone",
    "IsTrue",
    "Matches",
    "NotEquals",
    "ValueComparison",
    "Visible",
]
