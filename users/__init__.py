"""
users — read-side account queries (paginated listing, lookup by id).
"""
