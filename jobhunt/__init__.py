"""JobHunt: local job application tracker with ATS match reports."""

__version__ = "1.0.0"
