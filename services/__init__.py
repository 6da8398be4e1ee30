"""Service layer: Invidious client, playlist accumulation, transport and engine."""
