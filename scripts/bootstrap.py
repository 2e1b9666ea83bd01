#!/usr/bin/env python3
"""
Setup Script for the Solcerer Monitor
=====================================

Run this FIRST after cloning the project.

Usage:
    python scripts/bootstrap.py
"""

import os
import subprocess
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent


def run_command(cmd, description):
    """Run a command and report failures."""
    print(f"\n{'='*50}")
    print(f"📦 {description}")
    print(f"{'='*50}")
    print(f"Running: {' '.join(cmd)}\n")

    result = subprocess.run(cmd, cwd=project_root)
    if result.returncode != 0:
        print(f"⚠️  Warning: {description} may have had issues")
        return False
    return True


def main():
    print("""
    ╔═══════════════════════════════════════════════════════╗
    ║          Solcerer Monitor - Setup                     ║
    ╚═══════════════════════════════════════════════════════╝
    """)

    if sys.version_info < (3, 9):
        print("❌ Python 3.9+ required. Please upgrade Python.")
        sys.exit(1)

    print(f"✅ Python {sys.version_info.major}.{sys.version_info.minor} detected")

    run_command(
        [sys.executable, "-m", "pip", "install", "-e", ".[test]"],
        "Installing the package and its dependencies"
    )

    run_command(
        [sys.executable, "-m", "playwright", "install", "chromium"],
        "Installing Chromium for Playwright"
    )

    for name in ("data", "logs"):
        os.makedirs(project_root / name, exist_ok=True)
    print("\n✅ Created data/ and logs/ directories")

    env_path = project_root / ".env"
    if not env_path.exists():
        print("\n⚠️  No .env found. Copy .env.example to .env and fill in:")
        print("   DISCORD_WEBHOOK_TRACKED_POSTS / _PRICE_ALERTS / _WHALE_MOVES")
        print("   X_AUTH_TOKEN, X_CT0 (cookies from a logged-in x.com session)")
        print("   HELIUS_API_KEY")

    print(f"""
    {'='*50}
    ✅ SETUP COMPLETE!
    {'='*50}

    Next steps:

    1. Check a source by hand:
       python scripts/check_sources.py --mint <MINT>

    2. Dry run (alerts printed, nothing posted):
       python scripts/run_monitor.py --dry-run

    3. Verify a webhook:
       python scripts/run_monitor.py --test-webhook tracked_posts
    """)


if __name__ == "__main__":
    main()
