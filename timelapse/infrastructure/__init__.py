"""Infrastructure adapters: persistence, authentication, HTTP middleware, telemetry."""
