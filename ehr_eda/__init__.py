"""EHR EDA: descriptive statistics over a Synthea CSV export."""
__version__ = "0.1.0"
