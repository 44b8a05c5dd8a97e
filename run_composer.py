"""
run_composer.py: CLI Entry Point

This script serves as the command-line interface entry point for the
grid composer. It forwards execution to the CLI logic defined in
`src/grid_composer/compose/cli.py`.

Usage:
    python run_composer.py a.jpg b.jpg c.jpg --layout 2x2 --out grid.png

This wrapper allows you to run the tool directly without needing to
modify PYTHONPATH or install the project as a package.

For help on available options, run:
    python run_composer.py --help
"""
import sys
# Source code in src/ subdirectory
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

import grid_composer.compose.cli as gc_cli

if __name__ == "__main__":
    sys.exit(gc_cli.main())
