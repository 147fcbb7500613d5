"""Shared Playwright page setup for facility page fetches."""

import random

from playwright.async_api import Page, Route

BLOCKED_RESOURCE_TYPES: frozenset[str] = frozenset(
    {"image", "stylesheet", "font", "media"}
)


async def configure_page_for_scraping(page: Page, *, timeout_ms: int = 30000) -> None:
    """Set up a Playwright page for efficient scraping.

    Blocks resource types the schedule tables don't need (images,
    stylesheets, fonts, media) to reduce bandwidth and page load time.

    Args:
        page: Playwright Page instance.
        timeout_ms: Default timeout for navigation and element waits.
    """

    async def _block_resources(route: Route) -> None:
        if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
            await route.abort()
        else:
            await route.continue_()

    await page.route("**/*", _block_resources)
    page.set_default_timeout(timeout_ms)
    page.set_default_navigation_timeout(timeout_ms)


def random_delay_seconds(bounds_ms: tuple[int, int]) -> float:
    """Random pause within (min, max) milliseconds, in seconds."""
    low, high = bounds_ms
    return random.randint(low, max(low, high)) / 1000
