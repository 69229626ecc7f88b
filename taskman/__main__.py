"""
FILE: taskman/__main__.py
PURPOSE: Allow `python -m taskman` (same as the `taskman` script)
"""

from .cli.main import main

main()
