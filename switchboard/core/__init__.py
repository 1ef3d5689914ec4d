"""Provider configuration and resolution."""
