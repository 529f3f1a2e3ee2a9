"""Feature modules: certificate issuance and encrypted PDF references."""
