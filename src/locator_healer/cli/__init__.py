"""locator-healer Command Line Interface.

Provides CLI commands for:
- Decoding a raw model answer into a locator
- Previewing the healing prompt for a page source
- Listing the audit trail of healed locators

Usage:
    locator-healer decode response.txt
    locator-healer prompt page.xml --platform android --locator id=login --error "not found"
    locator-healer audit logs/resolved-elements.json --format json
"""

from .main import main

__all__ = ["main"]
