"""Order detail aggregation and pick-list compiler for marketplace seller pages."""
