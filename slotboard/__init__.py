"""
slotboard - slot-grid scheduling core for an appointment admin console.
"""

__version__ = "0.1.0"
