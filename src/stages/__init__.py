"""
Pipeline stages.

- collect: Discogs traversal into the checkpoint
- push:    checkpoint replay into the playlist
"""
