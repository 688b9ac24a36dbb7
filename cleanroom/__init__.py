"""
Cleanroom - per-test fixture isolation for view components.

Every test case gets a fresh fixture context with its own collaborators and
spies, and every view a case mounts is detached again, pass or fail.

Usage:
    cleanroom showcase              # Run 3000 generated heavy-load suites
    cleanroom showcase -n 10 --fail-index 3
"""

__version__ = "0.1.0"
