"""Business logic. Routers validate input, call services, and return responses."""
