"""
Generic list-query engine: query-string translation, pagination planning and
result assembly over any declared collection.
"""
