# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Session manager — roster, speaker rotation and session timing service."""
