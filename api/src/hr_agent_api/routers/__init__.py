"""HTTP routers for HR Agent API."""
