"""
Fingerprinting and on-disk storage of recordings.
"""
