"""Personal and small-business finance service"""
__version__ = "0.1.0"
