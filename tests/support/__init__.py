"""
Test Support

Playwright doubles and example page objects shared by unit and e2e tests.

Usage:
    from tests.support.fakes import make_locator, make_page
    from tests.support.page_objects import LoginPage
"""
