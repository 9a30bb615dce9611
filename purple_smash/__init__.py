"""
Purple Smash - Keyboard Smashing for Little Ones

A Textual toy where every key makes something happen:
- Letters and numbers pop up big and colorful
- Other keys make shapes (with faces!)
- The mouse draws rainbow trails
- Giggles, or a friendly voice saying what appeared

Designed for ages 1-4. Nothing a baby presses can break the session.
"""

__version__ = "0.1.0"
