#!/usr/bin/env python3
"""
Script to run the RoPS capture pipeline from the project root directory.
"""

import sys
from pathlib import Path

# Add the current directory to the Python path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from rops.examples.rops_pipeline import main

if __name__ == "__main__":
    sys.exit(main())
