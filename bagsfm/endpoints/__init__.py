"""One module per API area; each function performs a single API call."""
