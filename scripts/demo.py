"""
    Demo script for the decision nodes
    Quick run of the complete tree against the simulation
"""

import sys
from pathlib import Path

#Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from main import main

if __name__ == "__main__":
    print("Running NavigateTo + IsInFront demo (truncated goal)...")
    print("Use --frame <name> to navigate to a TF frame instead of x/y")
    print()

    sys.exit(main([
        '--x', '2.0',
        '--y', '3.0',
        '--truncate', '0.5',
        '--entity-bearing', '-20',
    ] + sys.argv[1:]))
