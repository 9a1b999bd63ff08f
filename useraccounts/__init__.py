"""User accounts, addresses and country reference API."""
