#!/usr/bin/env python3
"""Start the FinAssist demo page under Streamlit.

Extra arguments go straight to ``streamlit run``, for example
``python run_finassist.py --server.port 8502``.
"""

import subprocess
import sys
from pathlib import Path

PACKAGE_DIR = Path(__file__).parent.resolve() / "finassist"


def main(argv=None) -> int:
    extra = list(sys.argv[1:] if argv is None else argv)
    command = [sys.executable, "-m", "streamlit", "run", str(PACKAGE_DIR / "Home.py"), *extra]
    return subprocess.call(command, cwd=PACKAGE_DIR)


if __name__ == "__main__":
    raise SystemExit(main())
