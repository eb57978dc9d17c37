"""
Tasas Scraper - Colombian mortgage rate aggregator.

Architecture:
- core/: Stable foundation (models, HTTP client, numbers, rankings, storage)
- parsers/: One parser per bank (HTML pages and PDF rate sheets)
- plugins/: PDF text extraction
- config/: YAML-driven settings
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
