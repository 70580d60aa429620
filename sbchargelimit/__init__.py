"""Keep a battery within a charge band by switching a BLE smart plug."""

__version__ = "0.1.0"
