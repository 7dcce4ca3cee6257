"""Wake Listener - real-time wake phrase detection"""

__version__ = '0.3.0'
