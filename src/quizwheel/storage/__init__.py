"""DuckDB persistence: users, settlements, questions."""
