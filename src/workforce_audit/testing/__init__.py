"""Testing – in-memory fakes for the audit pipeline ports."""
