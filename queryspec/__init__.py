"""Query-string filtering and pagination planning.

The package converts an untyped mapping of query parameters into a composable predicate and a page
specification for a declared entity type. Execution of the resulting plan is left to an engine.
"""
