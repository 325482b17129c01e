"""
Application Layer for the workout parsing service.

This package contains:
- ports/: Abstract interfaces (what the pipeline and use cases need)
- use_cases/: Pipeline orchestrator and workout operations
- exceptions.py: Error taxonomy shared by every layer
"""
