"""Estate Locator: neighborhood verification and place discovery."""
