"""
fedipost Posts Service application package.
"""
