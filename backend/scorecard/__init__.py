"""
Scorecard - weekly business metrics tracked against targets.
"""
__version__ = "1.0.0"
