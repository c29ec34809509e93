"""
Page Objects

Base class for the Page Object Model. Concrete pages live with the suites
that use them and build on BasePage.

Usage:
    from playwise.pages import BasePage
"""

from playwise.pages.base import BasePage

__all__ = ["BasePage"]
