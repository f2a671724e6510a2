"""
Persistence (async SQLAlchemy).

Models:
- StoredItem (name, quantity, box row/col, box size)
- ItemTag (one searchable word per item)
- CommandLog (audit trail of commands and responses)
"""
