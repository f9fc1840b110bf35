"""
Hive Portal - community articles, videos and the resident wishlist.
"""
