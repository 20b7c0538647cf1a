"""HTTP routers: todo endpoints and token issuance."""
