"""CoachSearching Application Entry Point.

Simple redirect to the frontend app.

Run with: streamlit run app.py
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

# Import and run the frontend app
from coachsearching.app import main

if __name__ == "__main__":
    main()
