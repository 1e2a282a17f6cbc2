"""
Client-side storage: one of three backends behind `StorageService`.
"""
