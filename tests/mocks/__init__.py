"""Mock factories shared across tests."""
