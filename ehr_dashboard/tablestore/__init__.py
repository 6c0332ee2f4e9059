"""Access to the external REST table store (``tables/<resource>``)."""
