"""
Repeater: pass-counting router for flow-based data pipelines.

Counts how many times a record has passed through the processor and routes
it to "repeat" until a configured limit is exceeded, then to "no-repeat".
"""

__version__ = "1.0.0"
