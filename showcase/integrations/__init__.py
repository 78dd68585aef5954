"""showcase.integrations — Outbound HTTP gateway modules."""
