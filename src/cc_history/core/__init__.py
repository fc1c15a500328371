"""Pure conversation model: parsing, indexing, grouping, view state."""
