"""Core package: context, transport, auth, config and exceptions."""
