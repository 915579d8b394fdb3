"""HTTP routers for the CallFlow API."""
