"""
Puyo Recognition System
=======================

Turns a Puyo Puyo Quest screenshot into the board / queue encoding used
by puyosim.com links.

Architecture:
    1. Anchor Search      – multi-scale template matching of UI controls
    2. Board Location     – anchor offset tables, pixel-scan fallback
    3. Cell Sampling      – 3×3 grid per cell, quorum majority vote
    4. Colour Classifier  – weighted HSV distance to fixed targets
    5. Encoding           – 48-char board + 8-char queue → URL
"""

__version__ = "1.0.0"
