"""
Road-segment travel-time datastore: weekly histogram encoding and its I/O plumbing.
"""
