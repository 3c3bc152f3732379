"""
PDF Renderer - HTML page to PDF conversion service.

Drives a shared headless Chromium through Playwright and exposes a small
HTTP API for turning a URL into a PDF document.
"""

__version__ = "1.0.0"
