"""
Posts domain: the post model, caller-side construction and the cached data path.
"""
