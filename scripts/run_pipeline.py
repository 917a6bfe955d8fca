#!/usr/bin/env python
"""
Pipeline runner script

Run this script to export Postgres tables to S3 or restore them into
Redshift without installing the package.
"""

import os
import sys

# Add the parent directory to the path so we can import packages
sys.path.insert(0, os.path.abspath(os.path.dirname(os.path.dirname(__file__))))

from warehouse_pipeline.cli import run

if __name__ == "__main__":
    run()
