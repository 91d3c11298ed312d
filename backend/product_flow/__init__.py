"""Product Flow: idea backlogs and knowledge bases for product portfolios."""

__version__ = "0.1.0"
