"""Next page handling."""
import re

DEFAULT_NEXT_PAGE = '/'

_SAFE_PATH = re.compile(r'^/(?![/\\])[^\s]*$')


def good_next_page(next_page: str) -> str:
    """Checks if a next_page is good and returns it.

    Only relative paths on this site are good; anything else (including
    protocol-relative ``//host`` URLs) is replaced by the home page.
    """
    good = (next_page and len(next_page) < 300
            and _SAFE_PATH.match(next_page))
    return next_page if good else DEFAULT_NEXT_PAGE
