"""Page driver - the browser primitives the replay engine relies on."""
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from playwright.sync_api import ElementHandle, Page, TimeoutError as PlaywrightTimeout

from workflow_replay.utils.config import config
from workflow_replay.utils.logger import setup_logger


class PageDriver(Protocol):
    """
    Everything the recorder and executor need from a live page.

    hover/click/navigate return only after the page has had a chance to
    settle (navigation, network) from the action they triggered.
    """

    def query_selector(self, selector: str) -> Optional[Any]: ...

    def query_xpath(self, xpath: str) -> Optional[Any]: ...

    def hover(self, element: Any) -> None: ...

    def click(self, element: Any) -> None: ...

    def type_character(self, char: str) -> None: ...

    def text_content(self, element: Any) -> str: ...

    def evaluate(self, expression: str, arg: Any = None) -> Any: ...

    def navigate(self, url: str) -> None: ...

    def scroll_by(self, delta_y: int, element: Any = None) -> None: ...

    def screenshot(self) -> bytes: ...

    def set_input_files(self, element: Any, path: Path) -> None: ...

    def upload_via_file_chooser(self, element: Any, path: Path) -> None: ...

    def extract_selector_candidates(self, element: Any) -> List[Dict[str, Any]]: ...

    def describe_accessibility(self, element: Any) -> Dict[str, str]: ...


class PlaywrightPageDriver:
    """PageDriver over a Playwright sync Page."""

    # Runs inside the page. Emits every locator the element supports, each
    # tagged with a fixed priority; absent attributes are simply skipped.
    SELECTOR_CANDIDATES_JS = """
    (el) => {
        const results = [];
        const quote = (v) => v.replace(/\\\\/g, '\\\\\\\\').replace(/"/g, '\\\\"');
        // XPath 1.0 has no escapes: pick whichever quote is absent, else concat()
        const xpathLiteral = (v) => {
            if (!v.includes('"')) return `"${v}"`;
            if (!v.includes("'")) return `'${v}'`;
            return 'concat("' + v.split('"').join(`", '"', "`) + '")';
        };
        const tag = el.tagName.toLowerCase();

        if (el.id) {
            results.push({type: 'id', value: '#' + CSS.escape(el.id), priority: 1});
        }

        const testAttr = ['data-testid', 'data-test', 'data-cy'].find(a => el.getAttribute(a));
        if (testAttr) {
            results.push({type: 'testid', value: `[${testAttr}="${quote(el.getAttribute(testAttr))}"]`, priority: 2});
        }

        const ariaLabel = el.getAttribute('aria-label');
        if (ariaLabel) {
            results.push({type: 'aria-label', value: `[aria-label="${quote(ariaLabel)}"]`, priority: 3});
        }

        const name = el.getAttribute('name');
        if (name) {
            results.push({type: 'name', value: `[name="${quote(name)}"]`, priority: 4});
        }

        const role = el.getAttribute('role');
        if (role && ariaLabel) {
            results.push({
                type: 'role-name',
                value: `[role="${quote(role)}"][aria-label="${quote(ariaLabel)}"]`,
                priority: 5
            });
        }

        if (typeof el.className === 'string' && el.className.trim()) {
            const classes = el.className.trim().split(/\\s+/).slice(0, 3).map(c => CSS.escape(c)).join('.');
            results.push({type: 'class', value: `${tag}.${classes}`, priority: 6});
        }

        const inputType = el.getAttribute('type');
        if (tag === 'input' && inputType) {
            results.push({type: 'input-type', value: `input[type="${quote(inputType)}"]`, priority: 7});
        }

        const placeholder = el.getAttribute('placeholder');
        if (placeholder) {
            results.push({type: 'placeholder', value: `[placeholder="${quote(placeholder)}"]`, priority: 8});
        }

        const text = (el.textContent || '').replace(/\\s+/g, ' ').trim();
        if (text && text.length < 50 && (tag === 'button' || tag === 'a')) {
            results.push({type: 'text', value: `//${tag}[normalize-space()=${xpathLiteral(text)}]`, priority: 9});
        }

        const sameTagIndex = (node) => {
            let index = 1;
            for (let s = node.previousElementSibling; s; s = s.previousElementSibling) {
                if (s.tagName === node.tagName) index++;
            }
            return index;
        };

        const xpathParts = [];
        let xpath = null;
        for (let node = el; node && node.nodeType === Node.ELEMENT_NODE; node = node.parentElement) {
            if (node.id) {
                xpath = `//*[@id=${xpathLiteral(node.id)}]` + (xpathParts.length ? '/' + xpathParts.join('/') : '');
                break;
            }
            xpathParts.unshift(`${node.tagName.toLowerCase()}[${sameTagIndex(node)}]`);
        }
        results.push({type: 'xpath', value: xpath || '/' + xpathParts.join('/'), priority: 10});

        const cssParts = [];
        for (let node = el; node && node.nodeType === Node.ELEMENT_NODE; node = node.parentElement) {
            if (node.id) {
                cssParts.unshift('#' + CSS.escape(node.id));
                break;
            }
            const nth = sameTagIndex(node);
            cssParts.unshift(node.tagName.toLowerCase() + (nth > 1 ? `:nth-of-type(${nth})` : ''));
        }
        results.push({type: 'css-path', value: cssParts.join(' > '), priority: 11});

        return results;
    }
    """

    ACCESSIBILITY_JS = """
    (el) => {
        const implicitRoles = {
            a: el.hasAttribute('href') ? 'link' : '', button: 'button', select: 'combobox',
            textarea: 'textbox', img: 'img', h1: 'heading', h2: 'heading', h3: 'heading',
            h4: 'heading', h5: 'heading', h6: 'heading', nav: 'navigation', form: 'form',
            ul: 'list', ol: 'list', li: 'listitem'
        };
        const inputRoles = {checkbox: 'checkbox', radio: 'radio', button: 'button',
                            submit: 'button', search: 'searchbox', range: 'slider'};
        const tag = el.tagName.toLowerCase();
        let role = el.getAttribute('role') || implicitRoles[tag] || '';
        if (!role && tag === 'input') {
            role = inputRoles[(el.getAttribute('type') || 'text').toLowerCase()] || 'textbox';
        }

        const textOf = (ids) => (ids || '').split(/\\s+/)
            .map(id => document.getElementById(id))
            .filter(Boolean)
            .map(n => (n.textContent || '').trim())
            .join(' ');

        const name = el.getAttribute('aria-label')
            || textOf(el.getAttribute('aria-labelledby'))
            || (el.labels && el.labels.length ? (el.labels[0].textContent || '').trim() : '')
            || el.getAttribute('alt')
            || el.getAttribute('title')
            || el.getAttribute('placeholder')
            || (el.innerText || '').trim().substring(0, 100);

        const description = textOf(el.getAttribute('aria-describedby'))
            || (el.getAttribute('title') !== name ? el.getAttribute('title') : '')
            || '';

        return {role: role || '', name: name || '', description: description || ''};
    }
    """

    def __init__(
        self,
        page: Page,
        settle_timeout: Optional[float] = None,
        file_chooser_timeout: Optional[float] = None
    ):
        """
        Args:
            page: Playwright page, owned by the caller
            settle_timeout: Seconds to wait for load after click/hover/navigate
            file_chooser_timeout: Seconds to wait for a file chooser dialog
        """
        self.page = page
        self.settle_timeout = settle_timeout if settle_timeout is not None else config.settle_timeout
        self.file_chooser_timeout = (
            file_chooser_timeout if file_chooser_timeout is not None else config.file_chooser_timeout
        )
        self.logger = setup_logger("PageDriver")

    # =========================================================================
    # QUERIES
    # =========================================================================

    def query_selector(self, selector: str) -> Optional[ElementHandle]:
        return self.page.query_selector(selector)

    def query_xpath(self, xpath: str) -> Optional[ElementHandle]:
        return self.page.query_selector(f"xpath={xpath}")

    # =========================================================================
    # ELEMENT ACTIONS
    # =========================================================================

    def hover(self, element: ElementHandle):
        element.hover()
        self._settle()

    def click(self, element: ElementHandle):
        element.click()
        self._settle()

    def type_character(self, char: str):
        self.page.keyboard.type(char)

    def text_content(self, element: ElementHandle) -> str:
        return element.text_content() or ""

    def set_input_files(self, element: ElementHandle, path: Path):
        element.set_input_files(str(path))

    def upload_via_file_chooser(self, element: ElementHandle, path: Path):
        with self.page.expect_file_chooser(timeout=self.file_chooser_timeout * 1000) as chooser_info:
            element.click()
        chooser_info.value.set_files(str(path))

    def extract_selector_candidates(self, element: ElementHandle) -> List[Dict[str, Any]]:
        return element.evaluate(self.SELECTOR_CANDIDATES_JS) or []

    def describe_accessibility(self, element: ElementHandle) -> Dict[str, str]:
        return element.evaluate(self.ACCESSIBILITY_JS) or {}

    # =========================================================================
    # PAGE ACTIONS
    # =========================================================================

    def evaluate(self, expression: str, arg: Any = None) -> Any:
        return self.page.evaluate(expression, arg)

    def navigate(self, url: str):
        self.page.goto(url, wait_until="domcontentloaded")
        self._settle()

    def scroll_by(self, delta_y: int, element: Optional[ElementHandle] = None):
        if element is not None:
            element.evaluate("(el, dy) => el.scrollBy({top: dy, behavior: 'smooth'})", delta_y)
        else:
            self.page.evaluate("(dy) => window.scrollBy({top: dy, behavior: 'smooth'})", delta_y)

    def screenshot(self) -> bytes:
        return self.page.screenshot(full_page=True, type="png")

    def _settle(self):
        """Wait for whatever navigation the last action kicked off."""
        try:
            self.page.wait_for_load_state("domcontentloaded", timeout=self.settle_timeout * 1000)
        except PlaywrightTimeout:
            self.logger.debug(f"Page did not settle within {self.settle_timeout}s, continuing")
