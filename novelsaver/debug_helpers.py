"""
Debug utilities for diagnosing extraction failures.
"""
import os
import re
from datetime import datetime

from .config import DEBUG_DIR
from .logging import logger


def save_failed_html(page_html, url, error_type="content_extraction", debug_dir=DEBUG_DIR):
    """Save HTML to file when extraction fails for manual inspection."""
    try:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        host = re.sub(r'[^A-Za-z0-9.-]+', '_', url.split('//')[-1].split('/')[0]) if url else "unknown"
        filename = f"failed_{host}_{error_type}_{timestamp}.html"
        os.makedirs(debug_dir, exist_ok=True)

        filepath = os.path.join(debug_dir, filename)
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(f"<!-- URL: {url} -->\n")
            f.write(f"<!-- Error Type: {error_type} -->\n")
            f.write(f"<!-- Timestamp: {timestamp} -->\n")
            f.write(page_html)

        logger.info(f"[DEBUG] Failed HTML saved to: {filepath}")
        return filepath
    except OSError as e:
        logger.error(f"[DEBUG] Failed to save HTML file: {e}")
        return None
