"""Daily precipitation and motor vehicle collisions: exploratory report and model comparison"""

__version__ = "1.0.0"
