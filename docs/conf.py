"""Sphinx configuration for Real Estate Manager documentation."""

import os
import sys
from datetime import datetime

sys.path.insert(0, os.path.abspath(".."))

project = "Real Estate Manager"
current_year = datetime.now().year
copyright = f"{current_year}, Real Estate Manager"
author = "Real Estate Manager Team"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
]

autodoc_member_order = "bysource"

templates_path = ["_templates"]
exclude_patterns: list[str] = []

html_theme = "alabaster"
