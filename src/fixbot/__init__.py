"""fixbot: watches Reddit comments and replies to known grammar mistakes."""

__version__ = "0.1.0"
