"""Query parameter layer.

Parameters arrive as text. This layer classifies keys, describes atomic comparisons as validated
`FilterExpression` records and converts raw values to the types declared by the entity.
"""
