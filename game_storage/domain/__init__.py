"""Domain layer (pure logic).

- Keep game lifecycle rules here: the transition table and input validation.
- Avoid I/O: no DB sessions, no HTTP/FastAPI, no outbound clients.
- Prefer deterministic functions (the current time is passed in as an argument).
"""
