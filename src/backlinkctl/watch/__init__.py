"""Event-driven adapter: keeps backlinks current while notes are edited."""
