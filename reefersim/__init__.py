"""Zonal thermal-fluid simulation of forced-air cooling in reefer containers."""

__version__ = "0.1.0"
