from __future__ import annotations

import os

from dotenv import load_dotenv

# Pick up a .env from the working directory (or a parent) when one exists
load_dotenv()

# ---------------------------------------------------------------------------
# Numerical analysis
# Fixed for reproducible output; changing any of these changes emitted
# coordinates.
# ---------------------------------------------------------------------------

# Forward-difference step used for every derivative estimate.
DERIVATIVE_STEP: float = 1e-4

# Uniform subdivisions of the domain scanned for derivative sign changes.
EXTREMA_SUBDIVISIONS: int = 100

# Digits kept on reported extremum coordinates.
EXTREMA_DECIMALS: int = 3

# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

# Deepest nesting accepted from the parser and in the compiled tree.
EXPRESSION_MAX_DEPTH: int = 100

# ---------------------------------------------------------------------------
# Markup
# ---------------------------------------------------------------------------

PLOT_SAMPLES: int = 300

# Vertical distance between an extremum and its label node.
EXTREMA_LABEL_OFFSET: int = 1

# Non-breaking-space marker stripped before rendering.
NBSP_MARKER: str = "&nbsp;"

# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

LOG_LEVEL: str = os.getenv("TIKZ_PLOTTER_LOG_LEVEL", "WARNING")
