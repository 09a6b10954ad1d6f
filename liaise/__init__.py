"""Liaise: patient-friendly medical summaries and clinical notes."""

__version__ = "0.1.0"
