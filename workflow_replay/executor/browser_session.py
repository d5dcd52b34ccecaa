"""Browser lifecycle for the CLIs, using Playwright."""
from typing import Optional

from playwright.sync_api import sync_playwright, Browser, BrowserContext, Page, Playwright

from workflow_replay.executor.page_driver import PlaywrightPageDriver
from workflow_replay.utils.config import config
from workflow_replay.utils.logger import setup_logger


class BrowserSession:
    """
    Launches Chromium and hands out a page driver for it.

    Every driver primitive on the page is bounded by the step timeout.

    Usage:
        with BrowserSession(headless=True) as session:
            driver = session.launch("https://example.com")
    """

    def __init__(self, headless: Optional[bool] = None, step_timeout: Optional[float] = None):
        """
        Args:
            headless: Run browser in headless mode
            step_timeout: Seconds any single page operation may take
        """
        self.headless = config.browser_headless if headless is None else headless
        self.step_timeout = config.step_timeout if step_timeout is None else step_timeout
        self.logger = setup_logger("BrowserSession")

        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    def launch(self, url: Optional[str] = None) -> PlaywrightPageDriver:
        """
        Launch browser and optionally navigate to URL.

        Returns:
            Page driver bound to the new page
        """
        self.logger.info("Launching browser...")
        self.playwright = sync_playwright().start()

        self.browser = self.playwright.chromium.launch(
            headless=self.headless,
            args=[
                "--disable-blink-features=AutomationControlled",
                "--disable-dev-shm-usage",
            ]
        )
        self.context = self.browser.new_context(
            viewport={"width": config.viewport_width, "height": config.viewport_height}
        )
        self.page = self.context.new_page()
        self.page.set_default_timeout(self.step_timeout * 1000)

        if url:
            self.page.goto(url, wait_until="domcontentloaded")
            self.logger.info(f"Navigated to: {url}")

        return PlaywrightPageDriver(self.page)

    def close(self):
        """Close browser and cleanup."""
        if self.context:
            self.context.close()
            self.context = None
            self.page = None

        if self.browser:
            self.browser.close()
            self.browser = None

        if self.playwright:
            self.playwright.stop()
            self.playwright = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
