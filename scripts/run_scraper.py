"""Manual scraper runner for testing and debugging category pages.

Runs a single scrape without touching the database and prints what was
found. Requires the package to be installed (``pip install -e .``).

Usage:
    python scripts/run_scraper.py
    python scripts/run_scraper.py --url https://oda.com/no/categories/20-frukt-og-gront/
    python scripts/run_scraper.py --max-pages 1 --headful --export
"""

import sys

from oda_scraper.cli import main

if __name__ == "__main__":
    sys.exit(main(["--no-db", *sys.argv[1:]]))
