"""storage
Persistence bridge: snapshot schema, tolerant parsing, state stores.
"""
