"""Composable predicates and their construction from filter expressions."""
