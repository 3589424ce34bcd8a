"""Core modules: processing, record, gateway and their supporting stack."""
