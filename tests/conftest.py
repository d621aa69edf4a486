"""Make the repository root importable when the package is not installed."""
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
