"""
Page Objects

Example Page Object Model classes used by the test-suite.
They follow the-internet.herokuapp.com login flow.

Usage:
    from tests.support.page_objects import LoginPage, SecureAreaPage

    login = LoginPage(actions, base_url)
    await login.navigate()
    await login.login("tomsmith", "SuperSecretPassword!")
"""

from tests.support.page_objects.login_page import LoginPage, SecureAreaPage

__all__ = ["LoginPage", "SecureAreaPage"]
