"""
Process, media, storage and validation helpers.
"""
