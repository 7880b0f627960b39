"""HTTP routers for markwatch."""
