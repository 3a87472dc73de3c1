"""
Root entry point – delegates to the puyo_vision package.

Usage:
    python puyo_vision.py recognize --image screenshot.png --anchor anchors/menu.png
    python puyo_vision.py render    --board <48 chars> --queue BCDEAAAA --output synthetic.png
"""

from puyo_vision.main import main

if __name__ == "__main__":
    main()
